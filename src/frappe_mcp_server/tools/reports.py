#!/usr/bin/env python3
# src/frappe_mcp_server/tools/reports.py
"""
Report tools: query reports, report metadata and ERPNext financial statements.
"""

from typing import Any

from ..registry import ToolDescriptor, tool
from .bench import BenchRunner

QUERY_REPORT_RUN = "frappe.desk.query_report.run"

# ERPNext ships the three statements as query reports
FINANCIAL_STATEMENT_REPORTS = {
    "Profit and Loss": "Profit and Loss Statement",
    "Balance Sheet": "Balance Sheet",
    "Cash Flow": "Cash Flow",
}

_SITE = {"type": "string", "description": "Site name"}


def financial_statement_filters(company: str, fiscal_year: str | None = None) -> dict[str, Any]:
    """Report filters for a yearly financial statement."""
    filters: dict[str, Any] = {"company": company, "periodicity": "Yearly"}
    if fiscal_year:
        filters.update(
            {"filter_based_on": "Fiscal Year", "from_fiscal_year": fiscal_year, "to_fiscal_year": fiscal_year}
        )
    return filters


def report_tools(runner: BenchRunner) -> list[ToolDescriptor]:
    @tool(
        name="frappe_run_query_report",
        description="Execute a Frappe query report",
        input_schema={
            "type": "object",
            "properties": {
                "report_name": {"type": "string", "description": "Name of the query report"},
                "filters": {"type": "object", "description": "Report filters"},
                "site": _SITE,
            },
            "required": ["report_name", "site"],
        },
    )
    async def run_query_report(arguments: dict[str, Any]) -> str:
        return await runner.execute(
            QUERY_REPORT_RUN,
            args=[arguments["report_name"]],
            kwargs={"filters": arguments.get("filters", {})},
            site=arguments["site"],
        )

    @tool(
        name="frappe_get_report_meta",
        description="Get metadata for a Frappe report",
        input_schema={
            "type": "object",
            "properties": {"report_name": {"type": "string", "description": "Name of the report"}, "site": _SITE},
            "required": ["report_name", "site"],
        },
    )
    async def get_report_meta(arguments: dict[str, Any]) -> str:
        return await runner.execute("frappe.client.get", args=["Report", arguments["report_name"]], site=arguments["site"])

    @tool(
        name="frappe_list_reports",
        description="List available Frappe reports",
        input_schema={"type": "object", "properties": {"site": _SITE}, "required": ["site"]},
    )
    async def list_reports(arguments: dict[str, Any]) -> str:
        return await runner.execute(
            "frappe.client.get_list",
            args=["Report"],
            kwargs={"fields": ["name", "report_type", "ref_doctype", "module"], "limit_page_length": 0},
            site=arguments["site"],
        )

    @tool(
        name="frappe_run_doctype_report",
        description="Generate a report based on a DocType",
        input_schema={
            "type": "object",
            "properties": {
                "doctype": {"type": "string", "description": "DocType for the report"},
                "filters": {"type": "object", "description": "Filters for the report"},
                "site": _SITE,
            },
            "required": ["doctype", "site"],
        },
    )
    async def run_doctype_report(arguments: dict[str, Any]) -> str:
        return await runner.execute(
            "frappe.client.get_list",
            args=[arguments["doctype"]],
            kwargs={"filters": arguments.get("filters", {})},
            site=arguments["site"],
        )

    @tool(
        name="frappe_get_financial_statements",
        description="Get financial statements (P&L, Balance Sheet, Cash Flow)",
        input_schema={
            "type": "object",
            "properties": {
                "statement_type": {
                    "type": "string",
                    "enum": list(FINANCIAL_STATEMENT_REPORTS),
                    "description": "Type of financial statement",
                },
                "company": {"type": "string", "description": "Company name"},
                "fiscal_year": {"type": "string", "description": "Fiscal year"},
                "site": _SITE,
            },
            "required": ["statement_type", "company", "site"],
        },
    )
    async def get_financial_statements(arguments: dict[str, Any]) -> str:
        report_name = FINANCIAL_STATEMENT_REPORTS[arguments["statement_type"]]
        filters = financial_statement_filters(arguments["company"], arguments.get("fiscal_year"))
        return await runner.execute(
            QUERY_REPORT_RUN, args=[report_name], kwargs={"filters": filters}, site=arguments["site"]
        )

    return [run_query_report, get_report_meta, list_reports, run_doctype_report, get_financial_statements]


__all__ = ["FINANCIAL_STATEMENT_REPORTS", "financial_statement_filters", "report_tools"]
