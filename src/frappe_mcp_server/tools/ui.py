#!/usr/bin/env python3
# src/frappe_mcp_server/tools/ui.py
"""
UI generation tools: frappe-ui components, Vue pages and Tailwind blocks.

These are pure text generators and never touch the bench.
"""

import re
from typing import Any

import orjson

from ..registry import ToolDescriptor, tool
from .templates import (
    COMPONENT_TREE,
    INSPIRED_BLOCKS,
    TEMPLATE_CATALOG,
    UI_BLOCKS,
    component_sfc_template,
    component_template,
    generic_block_template,
    vue_page_template,
)

COMPONENT_TYPES = ["Button", "Dialog", "Form", "List", "DetailDrawer"]
BLOCK_TYPES = ["hero", "features", "pricing", "contact", "footer", "navbar", "sidebar", "card", "form"]

_CLASS_ATTR = re.compile(r'class="')


def theme_block(markup: str, theme: str) -> str:
    """Apply a theme to block markup."""
    if theme == "dark":
        return markup.replace("bg-base-100", "bg-base-300").replace("bg-base-200", "bg-base-400")
    return markup


def refine_markup(code: str, improvements: str) -> str:
    """Apply the keyword-driven refinements named in ``improvements``."""
    wanted = improvements.lower()
    refined = code
    if "responsive" in wanted:
        refined = _CLASS_ATTR.sub('class="md:', refined)
    if "dark" in wanted:
        refined = refined.replace("bg-base-100", "bg-base-300 dark:bg-base-100")
    if "animation" in wanted:
        refined = _CLASS_ATTR.sub('class="transition-all duration-300 ', refined)
    return refined


def ui_tools() -> list[ToolDescriptor]:
    @tool(
        name="frappe_generate_frappe_ui_component",
        description="Generate a Vue component using frappe-ui components",
        input_schema={
            "type": "object",
            "properties": {
                "component_name": {"type": "string", "description": "Name of the component"},
                "component_type": {
                    "type": "string",
                    "enum": COMPONENT_TYPES,
                    "description": "Type of frappe-ui component",
                },
                "props": {"type": "object", "description": "Component props"},
                "content": {"type": "string", "description": "Component content/template"},
            },
            "required": ["component_name", "component_type"],
        },
    )
    def generate_frappe_ui_component(arguments: dict[str, Any]) -> str:
        component_type = arguments["component_type"]
        markup = component_template(component_type, arguments.get("props", {}), arguments.get("content", ""))
        return f"Generated {component_type} component:\n\n{component_sfc_template(component_type, markup)}"

    @tool(
        name="frappe_generate_vue_page",
        description="Generate a Vue page with frappe-ui layout",
        input_schema={
            "type": "object",
            "properties": {
                "page_name": {"type": "string", "description": "Name of the page"},
                "route": {"type": "string", "description": "Route path"},
                "components": {
                    "type": "array",
                    "description": "List of components to include",
                    "items": {"type": "string"},
                },
            },
            "required": ["page_name", "route"],
        },
    )
    def generate_vue_page(arguments: dict[str, Any]) -> str:
        page = vue_page_template(arguments["page_name"], arguments.get("components", []))
        return f"Generated Vue page for route {arguments['route']}:\n\n{page}"

    @tool(
        name="frappe_get_vue_component_tree",
        description="Get the Vue component tree structure (simulated)",
        input_schema={
            "type": "object",
            "properties": {"page": {"type": "string", "description": "Page name"}},
            "required": ["page"],
        },
    )
    def get_vue_component_tree(arguments: dict[str, Any]) -> str:
        page = arguments["page"]
        tree = orjson.dumps({"page": page, "components": COMPONENT_TREE}, option=orjson.OPT_INDENT_2).decode()
        return f"Component tree for {page}:\n{tree}"

    @tool(
        name="frappe_create_ui_block",
        description="Create UI blocks using frappe-ui and Tailwind CSS patterns",
        input_schema={
            "type": "object",
            "properties": {
                "block_type": {"type": "string", "enum": BLOCK_TYPES, "description": "Type of UI block to create"},
                "theme": {
                    "type": "string",
                    "enum": ["light", "dark", "auto"],
                    "default": "light",
                    "description": "Theme for the block",
                },
                "customization": {"type": "string", "description": "Specific customization requirements"},
            },
            "required": ["block_type"],
        },
    )
    def create_ui_block(arguments: dict[str, Any]) -> str:
        block_type, theme = arguments["block_type"], arguments["theme"]
        markup = theme_block(UI_BLOCKS.get(block_type) or generic_block_template(block_type), theme)
        if arguments.get("customization"):
            markup += f"\n<!-- Customizations: {arguments['customization']} -->"
        return f"Generated {block_type} UI block ({theme} theme):\n\n{markup}"

    @tool(
        name="frappe_inspire_ui_block",
        description="Generate creative UI blocks inspired by modern design patterns",
        input_schema={
            "type": "object",
            "properties": {
                "inspiration": {"type": "string", "description": "Description of the inspiration or use case"},
                "framework": {
                    "type": "string",
                    "enum": ["vue", "react", "svelte"],
                    "default": "vue",
                    "description": "Target framework",
                },
            },
            "required": ["inspiration"],
        },
    )
    def inspire_ui_block(arguments: dict[str, Any]) -> str:
        inspiration = arguments["inspiration"]
        key = "landing" if "landing" in inspiration.lower() else "dashboard"
        return f'Inspired UI block for "{inspiration}" ({arguments["framework"]}):\n\n{INSPIRED_BLOCKS[key]}'

    @tool(
        name="frappe_refine_ui_block",
        description="Refine and improve existing UI blocks",
        input_schema={
            "type": "object",
            "properties": {
                "existing_code": {"type": "string", "description": "Existing UI block code to refine"},
                "improvements": {"type": "string", "description": "What improvements to make"},
            },
            "required": ["existing_code", "improvements"],
        },
    )
    def refine_ui_block(arguments: dict[str, Any]) -> str:
        improvements = arguments["improvements"]
        refined = refine_markup(arguments["existing_code"], improvements)
        return f'Refined UI block with improvements "{improvements}":\n\n{refined}'

    @tool(
        name="frappe_get_ui_templates",
        description="Get available UI templates and patterns",
        input_schema={
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "enum": list(TEMPLATE_CATALOG),
                    "default": "all",
                    "description": "Template category",
                }
            },
        },
    )
    def get_ui_templates(arguments: dict[str, Any]) -> str:
        category = arguments["category"]
        listing = "\n".join(f"- {name}" for name in TEMPLATE_CATALOG[category])
        return (
            f"Available {category} UI templates:\n{listing}\n\n"
            "Use frappe_create_ui_block to generate these templates."
        )

    return [
        generate_frappe_ui_component,
        generate_vue_page,
        get_vue_component_tree,
        create_ui_block,
        inspire_ui_block,
        refine_ui_block,
        get_ui_templates,
    ]


__all__ = ["BLOCK_TYPES", "COMPONENT_TYPES", "refine_markup", "theme_block", "ui_tools"]
