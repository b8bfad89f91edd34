#!/usr/bin/env python3
# src/frappe_mcp_server/tools/scaffold.py
"""
Scaffolding tools that write DocType and API source files into a bench's apps.

Handlers here do blocking file I/O, so they are plain functions and the
protocol engine runs them in the threadpool.
"""

import datetime
import logging
import re
from pathlib import Path
from typing import Any

import orjson

from ..registry import ToolDescriptor, tool
from .templates import api_endpoint_template, doctype_controller_template

logger = logging.getLogger(__name__)

FIELD_TYPES = [
    "Data",
    "Int",
    "Float",
    "Currency",
    "Date",
    "Datetime",
    "Text",
    "Long Text",
    "Check",
    "Select",
    "Link",
    "Table",
    "Attach",
    "Image",
]

APP_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
SKIPPED_DIRECTORIES = frozenset({"node_modules", "__pycache__"})


def scrub(name: str) -> str:
    """Frappe's folder/file naming: lower case, spaces and dashes to underscores."""
    return re.sub(r"[\s\-]+", "_", name.strip()).lower()


def app_path(frappe_path: str, app_name: str) -> Path:
    """Path of an app inside the bench, refusing names that could escape it."""
    if not APP_NAME_PATTERN.match(app_name):
        raise ValueError(f"Invalid app name '{app_name}': use lower-case letters, digits and underscores")
    return Path(frappe_path) / "apps" / app_name


def doctype_definition(
    doctype_name: str,
    module: str,
    fields: list[dict[str, Any]],
    is_submittable: bool = False,
    is_child: bool = False,
) -> dict[str, Any]:
    """Build the DocType JSON document."""
    return {
        "name": doctype_name,
        "doctype": "DocType",
        "module": module,
        "custom": 0,
        "is_submittable": int(is_submittable),
        "istable": int(is_child),
        "fields": [
            {
                "fieldname": field["fieldname"],
                "label": field["label"],
                "fieldtype": field["fieldtype"],
                "reqd": int(field.get("reqd", False)),
                "unique": int(field.get("unique", False)),
                "options": field.get("options") or "",
                "idx": index,
            }
            for index, field in enumerate(fields, start=1)
        ],
    }


def create_doctype_files(
    frappe_path: str,
    app_name: str,
    doctype_name: str,
    module: str,
    fields: list[dict[str, Any]],
    is_submittable: bool = False,
    is_child: bool = False,
) -> Path:
    """Write the DocType JSON, controller and package marker. Returns the DocType folder."""
    class_name = re.sub(r"\W+", "", doctype_name)
    if not IDENTIFIER_PATTERN.match(class_name):
        raise ValueError(f"Invalid DocType name '{doctype_name}'")
    module_folder = scrub(module)
    if not IDENTIFIER_PATTERN.match(module_folder):
        raise ValueError(f"Invalid module name '{module}'")

    folder_name = scrub(doctype_name)
    if not IDENTIFIER_PATTERN.match(folder_name):
        raise ValueError(f"Invalid DocType name '{doctype_name}': folder name '{folder_name}' is not an identifier")
    doctype_path = app_path(frappe_path, app_name) / app_name / module_folder / "doctype" / folder_name
    doctype_path.mkdir(parents=True, exist_ok=True)

    definition = doctype_definition(doctype_name, module, fields, is_submittable, is_child)
    (doctype_path / f"{folder_name}.json").write_bytes(orjson.dumps(definition, option=orjson.OPT_INDENT_2))
    (doctype_path / f"{folder_name}.py").write_text(
        doctype_controller_template(app_name, class_name, datetime.date.today().year)
    )
    (doctype_path / "__init__.py").write_text("")

    logger.info(f"Created DocType {doctype_name} in {doctype_path}")
    return doctype_path


def directory_tree(path: Path, prefix: str = "") -> str:
    """Render a directory as an indented listing.

    Hidden directories and dependency folders are listed but not descended into.
    """
    lines = []
    for item in sorted(path.iterdir(), key=lambda p: p.name):
        is_dir = item.is_dir()
        lines.append(f"{prefix}{'📁' if is_dir else '📄'} {item.name}\n")
        if is_dir and not item.name.startswith(".") and item.name not in SKIPPED_DIRECTORIES:
            lines.append(directory_tree(item, prefix + "  "))
    return "".join(lines)


def scaffold_tools(frappe_path: str) -> list[ToolDescriptor]:
    @tool(
        name="frappe_create_doctype",
        description="Create a new Frappe DocType with JSON definition and Python controller",
        input_schema={
            "type": "object",
            "properties": {
                "app_name": {"type": "string", "description": "Name of the Frappe app"},
                "doctype_name": {"type": "string", "description": "Name of the DocType"},
                "module": {"type": "string", "description": "Module where DocType belongs"},
                "fields": {
                    "type": "array",
                    "description": "Array of field definitions",
                    "items": {
                        "type": "object",
                        "properties": {
                            "fieldname": {"type": "string"},
                            "label": {"type": "string"},
                            "fieldtype": {"type": "string", "enum": FIELD_TYPES},
                            "reqd": {"type": "boolean", "default": False},
                            "unique": {"type": "boolean", "default": False},
                            "options": {"type": "string", "description": "Options for Select/Link fields"},
                        },
                        "required": ["fieldname", "label", "fieldtype"],
                    },
                },
                "is_submittable": {"type": "boolean", "default": False},
                "is_child": {"type": "boolean", "default": False},
            },
            "required": ["app_name", "doctype_name", "module", "fields"],
        },
    )
    def create_doctype(arguments: dict[str, Any]) -> str:
        app_name, doctype_name = arguments["app_name"], arguments["doctype_name"]
        create_doctype_files(
            frappe_path,
            app_name,
            doctype_name,
            arguments["module"],
            arguments["fields"],
            is_submittable=arguments["is_submittable"],
            is_child=arguments["is_child"],
        )
        return f'DocType "{doctype_name}" created successfully in app "{app_name}"'

    @tool(
        name="frappe_create_api_endpoint",
        description="Create a custom API endpoint for a Frappe app",
        input_schema={
            "type": "object",
            "properties": {
                "app_name": {"type": "string", "description": "Name of the Frappe app"},
                "endpoint_name": {"type": "string", "description": "Name of the API endpoint"},
                "method": {"type": "string", "enum": ["get", "post", "put", "delete"], "default": "get"},
                "code": {"type": "string", "description": "Python code for the API endpoint"},
            },
            "required": ["app_name", "endpoint_name", "code"],
        },
    )
    def create_api_endpoint(arguments: dict[str, Any]) -> str:
        app_name, endpoint_name = arguments["app_name"], arguments["endpoint_name"]
        if not IDENTIFIER_PATTERN.match(endpoint_name):
            raise ValueError(f"Invalid endpoint name '{endpoint_name}': must be a Python identifier")

        api_path = app_path(frappe_path, app_name) / app_name / "api"
        api_path.mkdir(parents=True, exist_ok=True)
        source = api_endpoint_template(
            app_name, endpoint_name, arguments["code"], datetime.date.today().year, arguments["method"]
        )
        (api_path / f"{endpoint_name}.py").write_text(source)

        logger.info(f"Created API endpoint {app_name}.api.{endpoint_name}")
        return f'API endpoint "{endpoint_name}" created in app "{app_name}"'

    @tool(
        name="frappe_get_app_structure",
        description="Get the structure of a Frappe app",
        input_schema={
            "type": "object",
            "properties": {"app_name": {"type": "string", "description": "Name of the Frappe app"}},
            "required": ["app_name"],
        },
    )
    def get_app_structure(arguments: dict[str, Any]) -> str:
        app_name = arguments["app_name"]
        path = app_path(frappe_path, app_name)
        if not path.is_dir():
            raise FileNotFoundError(f'App "{app_name}" not found')
        return f'App "{app_name}" structure:\n{directory_tree(path)}'

    return [create_doctype, create_api_endpoint, get_app_structure]


__all__ = ["FIELD_TYPES", "create_doctype_files", "directory_tree", "doctype_definition", "scaffold_tools", "scrub"]
