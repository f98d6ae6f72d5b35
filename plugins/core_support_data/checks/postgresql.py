# plugins/core_support_data/checks/postgresql.py

from plugins.core_database.contracts import DatabaseEngine
from ..contracts import CollectionResult
from ..plugin_base import SupportDataPlugin


class PostgresDateStyleCheck(SupportDataPlugin):
    """DateStyle 必须是 ISO，否则日期的读写会出错。"""
    display_path = "Database"

    async def run(self) -> CollectionResult:
        if self.database.engine is not DatabaseEngine.POSTGRESQL:
            return self.get_results()

        for row in await self.database.fetch_rows("show DateStyle"):
            date_style = row[0]
            if date_style and str(date_style).upper().startswith("ISO"):
                self.add_result_ok(label="Date Format", value=date_style)
            else:
                self.add_result_problem(
                    label="Date Format",
                    value=date_style,
                    message="Setting DateStyle needs to be ISO.",
                )

        return self.get_results()


class PostgresSizeCheck(SupportDataPlugin):
    display_path = "Database"

    async def run(self) -> CollectionResult:
        if self.database.engine is not DatabaseEngine.POSTGRESQL:
            return self.get_results()

        rows = await self.database.fetch_rows(
            "SELECT pg_size_pretty(pg_database_size(current_database()))",
            limit=1,
        )
        for row in rows:
            if row[0]:
                self.add_result_information(label="Database Size", value=row[0])
            else:
                self.add_result_problem(
                    label="Database Size",
                    value=row[0],
                    message="Could not determine database size.",
                )

        return self.get_results()
