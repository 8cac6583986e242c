from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Optional

from sales_analytics.core.config import get_settings
from sales_analytics.core.database import PostgresDatabase
from sales_analytics.core.logging import configure_logging
from sales_analytics.repositories.sales_analysis_repository import SalesAnalysisRepository
from sales_analytics.schemas.sales_analysis import SalesAnalysisReport
from sales_analytics.services.sales_analysis_service import SalesAnalysisService


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


async def build_report(sequential: bool) -> SalesAnalysisReport:
    settings = get_settings()
    database = PostgresDatabase.from_settings(settings)
    await database.connect()
    try:
        service = SalesAnalysisService(
            repository=SalesAnalysisRepository(database=database),
            concurrent_queries=settings.analysis_concurrent_queries and not sequential,
        )
        return await service.get_sales_analysis()
    finally:
        await database.close()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute the sales analysis report once and write it as JSON."
    )
    parser.add_argument(
        "--env-file",
        default=os.path.join(os.path.dirname(__file__), "..", ".env"),
        help="Path to .env file.",
    )
    parser.add_argument("--output", default=None, help="Write the report here instead of stdout.")
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Run the store queries one after another instead of concurrently.",
    )
    return parser.parse_args()


def write_report(report: SalesAnalysisReport, output: Optional[str]) -> None:
    payload = json.dumps(report.model_dump(mode="json"), indent=2)
    if not output:
        print(payload)
        return
    with open(output, "w", encoding="utf-8") as output_file:
        output_file.write(payload + "\n")


def main() -> None:
    args = parse_args()
    load_env_file(os.path.abspath(args.env_file))
    configure_logging(get_settings().log_level, stream=sys.stderr)

    report = asyncio.run(build_report(args.sequential))
    write_report(report, args.output)


if __name__ == "__main__":
    main()
