#!/usr/bin/env python3
# src/frappe_mcp_server/tools/documents.py
"""
Document CRUD and DocType metadata tools, all backed by ``frappe.client``
through ``bench execute``.
"""

import logging
from typing import Any

import orjson

from ..registry import ToolDescriptor, tool
from .bench import BenchRunner, parse_json_output

logger = logging.getLogger(__name__)

COMMON_DOCTYPES = ["User", "DocType", "Role"]
API_ENDPOINTS = ["/api/resource", "/api/method"]
DEVELOPMENT_TIPS = [
    "Use frappe.client for CRUD operations",
    "DocTypes define data models",
    "Custom scripts in hooks.py",
]

_SITE = {"type": "string", "description": "Site name"}
_DOCTYPE = {"type": "string", "description": "DocType of the document"}
_NAME = {"type": "string", "description": "Name of the document"}


def document_tools(runner: BenchRunner, default_site: str) -> list[ToolDescriptor]:
    """Create/read/update/delete/list documents and call whitelisted methods."""

    @tool(
        name="frappe_create_document",
        description="Create a new Frappe document",
        input_schema={
            "type": "object",
            "properties": {
                "doctype": _DOCTYPE,
                "data": {"type": "object", "description": "Document data as key-value pairs"},
                "site": _SITE,
            },
            "required": ["doctype", "data", "site"],
        },
    )
    async def create_document(arguments: dict[str, Any]) -> str:
        doc = {**arguments["data"], "doctype": arguments["doctype"]}
        return await runner.execute("frappe.client.insert", args=[doc], site=arguments["site"])

    @tool(
        name="frappe_get_document",
        description="Retrieve a Frappe document by DocType and name",
        input_schema={
            "type": "object",
            "properties": {"doctype": _DOCTYPE, "name": _NAME, "site": _SITE},
            "required": ["doctype", "name", "site"],
        },
    )
    async def get_document(arguments: dict[str, Any]) -> str:
        return await runner.execute(
            "frappe.client.get", args=[arguments["doctype"], arguments["name"]], site=arguments["site"]
        )

    @tool(
        name="frappe_update_document",
        description="Update an existing Frappe document",
        input_schema={
            "type": "object",
            "properties": {
                "doctype": _DOCTYPE,
                "name": _NAME,
                "data": {"type": "object", "description": "Updated document data"},
                "site": _SITE,
            },
            "required": ["doctype", "name", "data", "site"],
        },
    )
    async def update_document(arguments: dict[str, Any]) -> str:
        # set_value accepts a field -> value mapping and never creates a document
        return await runner.execute(
            "frappe.client.set_value",
            args=[arguments["doctype"], arguments["name"], arguments["data"]],
            site=arguments["site"],
        )

    @tool(
        name="frappe_delete_document",
        description="Delete a Frappe document",
        input_schema={
            "type": "object",
            "properties": {"doctype": _DOCTYPE, "name": _NAME, "site": _SITE},
            "required": ["doctype", "name", "site"],
        },
    )
    async def delete_document(arguments: dict[str, Any]) -> str:
        return await runner.execute(
            "frappe.client.delete", args=[arguments["doctype"], arguments["name"]], site=arguments["site"]
        )

    @tool(
        name="frappe_list_documents",
        description="List Frappe documents with optional filters",
        input_schema={
            "type": "object",
            "properties": {
                "doctype": {"type": "string", "description": "DocType to list"},
                "filters": {"type": "object", "description": "Filters as key-value pairs"},
                "limit": {"type": "number", "description": "Maximum number of results", "default": 20},
                "site": _SITE,
            },
            "required": ["doctype", "site"],
        },
    )
    async def list_documents(arguments: dict[str, Any]) -> str:
        return await runner.execute(
            "frappe.client.get_list",
            args=[arguments["doctype"]],
            kwargs={"filters": arguments.get("filters", {}), "limit_page_length": int(arguments["limit"])},
            site=arguments["site"],
        )

    @tool(
        name="frappe_call_method",
        description="Execute a whitelisted Frappe method",
        input_schema={
            "type": "object",
            "properties": {
                "method": {"type": "string", "description": "Method path (e.g., 'frappe.client.get')"},
                "args": {
                    "type": "array",
                    "description": "Arguments for the method",
                    "items": {
                        "anyOf": [
                            {"type": "string"},
                            {"type": "number"},
                            {"type": "boolean"},
                            {"type": "object"},
                            {"type": "array"},
                            {"type": "null"},
                        ]
                    },
                    "default": [],
                },
                "site": {"type": "string", "description": "Site name", "default": default_site},
            },
            "required": ["method"],
        },
    )
    async def call_method(arguments: dict[str, Any]) -> str:
        return await runner.execute(arguments["method"], args=arguments["args"], site=arguments["site"])

    return [create_document, get_document, update_document, delete_document, list_documents, call_method]


def metadata_tools(runner: BenchRunner) -> list[ToolDescriptor]:
    """DocType schema and field introspection."""

    async def fetch_doctype(doctype: str, site: str) -> str:
        return await runner.execute("frappe.client.get", args=["DocType", doctype], site=site)

    @tool(
        name="frappe_get_doctype_schema",
        description="Get the complete schema/structure of a Frappe DocType",
        input_schema={
            "type": "object",
            "properties": {"doctype": {"type": "string", "description": "Name of the DocType"}, "site": _SITE},
            "required": ["doctype", "site"],
        },
    )
    async def get_doctype_schema(arguments: dict[str, Any]) -> str:
        return await fetch_doctype(arguments["doctype"], arguments["site"])

    @tool(
        name="frappe_get_field_options",
        description="Get options for Link/Select fields in a DocType",
        input_schema={
            "type": "object",
            "properties": {
                "doctype": {"type": "string", "description": "DocType name"},
                "fieldname": {"type": "string", "description": "Field name"},
                "site": _SITE,
            },
            "required": ["doctype", "fieldname", "site"],
        },
    )
    async def get_field_options(arguments: dict[str, Any]) -> str:
        doctype, fieldname = arguments["doctype"], arguments["fieldname"]
        output = await fetch_doctype(doctype, arguments["site"])
        schema = parse_json_output(output)
        if not isinstance(schema, dict):
            return f"Field options for {fieldname} in {doctype}: {output}"
        return describe_field_options(schema, doctype, fieldname)

    @tool(
        name="frappe_get_doctype_list",
        description="List all available DocTypes in the system",
        input_schema={"type": "object", "properties": {"site": _SITE}, "required": ["site"]},
    )
    async def get_doctype_list(arguments: dict[str, Any]) -> str:
        return await runner.execute(
            "frappe.client.get_list", args=["DocType"], kwargs={"limit_page_length": 0}, site=arguments["site"]
        )

    @tool(
        name="frappe_get_frappe_usage_info",
        description="Get combined schema and usage information for Frappe development",
        input_schema={"type": "object", "properties": {"site": _SITE}, "required": ["site"]},
    )
    async def get_frappe_usage_info(arguments: dict[str, Any]) -> str:
        count = parse_json_output(
            await runner.execute("frappe.client.get_count", args=["DocType"], site=arguments["site"])
        )
        usage = {
            "total_doctypes": count if isinstance(count, int) else 0,
            "common_doctypes": COMMON_DOCTYPES,
            "api_endpoints": API_ENDPOINTS,
            "development_tips": DEVELOPMENT_TIPS,
        }
        return f"Frappe Usage Info: {orjson.dumps(usage, option=orjson.OPT_INDENT_2).decode()}"

    return [get_doctype_schema, get_field_options, get_doctype_list, get_frappe_usage_info]


def describe_field_options(schema: dict[str, Any], doctype: str, fieldname: str) -> str:
    """Summarise one field's options from a DocType document."""
    for field in schema.get("fields") or []:
        if field.get("fieldname") != fieldname:
            continue
        fieldtype = field.get("fieldtype", "")
        options = field.get("options") or ""
        if fieldtype == "Select":
            choices = [line for line in options.splitlines() if line.strip()]
            listing = "\n".join(f"- {choice}" for choice in choices) or "(none)"
            return f"Field options for {fieldname} in {doctype} (Select):\n{listing}"
        if fieldtype in ("Link", "Table", "Table MultiSelect"):
            return f"Field options for {fieldname} in {doctype} ({fieldtype}): links to DocType '{options}'"
        return f"Field options for {fieldname} in {doctype} ({fieldtype}): {options or '(none)'}"

    raise ValueError(f"Field '{fieldname}' not found in DocType '{doctype}'")


__all__ = ["describe_field_options", "document_tools", "metadata_tools"]
