#!/usr/bin/env python3
# src/frappe_mcp_server/tools/templates.py
"""
Code templates for the scaffolding and UI-generation tools.

Pure data with no imports from the main package.
"""

# ============================================================================
# Python scaffolding
# ============================================================================


def doctype_controller_template(app_name: str, class_name: str, year: int) -> str:
    """Return the content for a DocType's Python controller."""
    return f"""# Copyright (c) {year}, {app_name} contributors
# For license information, please see license.txt

import frappe
from frappe.model.document import Document


class {class_name}(Document):
    pass
"""


def api_endpoint_template(app_name: str, endpoint_name: str, body: str, year: int, http_method: str = "get") -> str:
    """Return the content for a whitelisted API module.

    ``body`` is indented into the endpoint's try block.
    """
    indented = "\n".join(f"        {line}" if line.strip() else "" for line in body.splitlines()) or "        pass"
    methods = [http_method.upper()]
    return f'''# Copyright (c) {year}, {app_name} contributors
# For license information, please see license.txt

import frappe
from frappe import _


@frappe.whitelist(methods={methods!r})
def {endpoint_name}():
    """{endpoint_name} API endpoint"""
    try:
{indented}
    except Exception as e:
        frappe.log_error(f"Error in {endpoint_name}: {{str(e)}}")
        frappe.throw(_("An error occurred while processing your request"))
'''


# ============================================================================
# frappe-ui components and pages
# ============================================================================


def component_template(component_type: str, props: dict, content: str) -> str:
    """Return the template markup for a frappe-ui component."""
    title = props.get("title")
    if component_type == "Button":
        attrs = " ".join(f'{key}="{value}"' for key, value in props.items())
        opening = f"<Button {attrs}>" if attrs else "<Button>"
        return f"{opening}\n  {content or 'Click me'}\n</Button>"
    if component_type == "Dialog":
        return f"""<Dialog v-model="showDialog" :title="{title or 'Dialog Title'}" :options="{{ size: 'lg' }}">
  <template #body>
    {content or 'Dialog content'}
  </template>
</Dialog>"""
    if component_type == "Form":
        return f"""<Form @submit="handleSubmit">
  {content or '<!-- Form fields here -->'}
  <Button type="submit">Submit</Button>
</Form>"""
    if component_type == "List":
        return f"""<ListView :rows="items" row-key="name">
  <template #default="{{ row }}">
    {content or '{{ row.name }}'}
  </template>
</ListView>"""
    if component_type == "DetailDrawer":
        return f"""<DetailDrawer v-model:open="drawerOpen" :title="{title or 'Details'}">
  {content or '<!-- Detail content -->'}
</DetailDrawer>"""
    return f"<div>{content}</div>"


def component_sfc_template(component_type: str, markup: str) -> str:
    """Wrap component markup in a single-file component."""
    return f"""<template>
  {markup}
</template>

<script setup>
import {{ {component_type} }} from 'frappe-ui'
</script>"""


def vue_page_template(page_name: str, components: list[str]) -> str:
    """Return a Vue page that renders ``components`` in order."""
    tags = "\n    ".join(f"<{name} />" for name in components)
    imports = "\n".join(f"import {name} from '@/components/{name}.vue'" for name in components)
    return f"""<template>
  <div class="page">
    <h1>{page_name}</h1>
    {tags}
  </div>
</template>

<script setup>
{imports}
</script>

<style scoped>
.page {{
  padding: 1rem;
}}
</style>"""


# Simulated tree until the gateway can inspect a running app
COMPONENT_TREE = [
    {"name": "Header", "children": []},
    {"name": "Sidebar", "children": []},
    {
        "name": "MainContent",
        "children": [
            {"name": "ListView", "children": []},
            {"name": "DetailDrawer", "children": []},
        ],
    },
]


# ============================================================================
# Tailwind UI blocks
# ============================================================================

UI_BLOCKS = {
    "hero": """<div class="hero min-h-screen bg-base-200">
  <div class="hero-content text-center">
    <div class="max-w-md">
      <h1 class="text-5xl font-bold">Hello there</h1>
      <p class="py-6">Provident cupiditate voluptatem et in. Quaerat fugiat ut assumenda excepturi exercitationem quasi.</p>
      <Button>Get Started</Button>
    </div>
  </div>
</div>""",
    "features": """<div class="grid grid-cols-1 md:grid-cols-3 gap-6 p-6">
  <div class="card bg-base-100 shadow-xl">
    <div class="card-body">
      <h3 class="card-title">Feature 1</h3>
      <p>Description of feature 1</p>
    </div>
  </div>
  <div class="card bg-base-100 shadow-xl">
    <div class="card-body">
      <h3 class="card-title">Feature 2</h3>
      <p>Description of feature 2</p>
    </div>
  </div>
  <div class="card bg-base-100 shadow-xl">
    <div class="card-body">
      <h3 class="card-title">Feature 3</h3>
      <p>Description of feature 3</p>
    </div>
  </div>
</div>""",
    "navbar": """<div class="navbar bg-base-100">
  <div class="navbar-start">
    <div class="dropdown">
      <div tabindex="0" role="button" class="btn btn-ghost lg:hidden">
        <svg class="h-5 w-5" fill="none" viewBox="0 0 24 24" stroke="currentColor">
          <path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" d="M4 6h16M4 12h8m-8 6h16" />
        </svg>
      </div>
      <ul tabindex="0" class="menu menu-sm dropdown-content bg-base-100 rounded-box z-[1] mt-3 w-52 p-2 shadow">
        <li><a>Item 1</a></li>
        <li><a>Item 2</a></li>
      </ul>
    </div>
    <a class="btn btn-ghost text-xl">App Name</a>
  </div>
  <div class="navbar-center hidden lg:flex">
    <ul class="menu menu-horizontal px-1">
      <li><a>Home</a></li>
      <li><a>About</a></li>
      <li><a>Contact</a></li>
    </ul>
  </div>
  <div class="navbar-end">
    <Button>Login</Button>
  </div>
</div>""",
    "card": """<div class="card bg-base-100 shadow-xl">
  <figure><img src="/placeholder.jpg" alt="Card" /></figure>
  <div class="card-body">
    <h2 class="card-title">Card Title</h2>
    <p>Card description goes here</p>
    <div class="card-actions justify-end">
      <Button>View</Button>
    </div>
  </div>
</div>""",
    "form": """<Form @submit="handleSubmit" class="space-y-4">
  <div>
    <label class="label">
      <span class="label-text">Name</span>
    </label>
    <input type="text" placeholder="Enter name" class="input input-bordered w-full" />
  </div>
  <div>
    <label class="label">
      <span class="label-text">Email</span>
    </label>
    <input type="email" placeholder="Enter email" class="input input-bordered w-full" />
  </div>
  <Button type="submit" class="w-full">Submit</Button>
</Form>""",
}


def generic_block_template(block_type: str) -> str:
    """Placeholder for block types without a dedicated template."""
    return f'<div class="p-4 bg-base-100 rounded-lg">{block_type} block</div>'


INSPIRED_BLOCKS = {
    "dashboard": """<div class="min-h-screen bg-gradient-to-br from-blue-50 to-indigo-100 p-6">
  <div class="max-w-7xl mx-auto">
    <div class="grid grid-cols-1 md:grid-cols-4 gap-6 mb-8">
      <div class="stats shadow">
        <div class="stat">
          <div class="stat-title">Total Users</div>
          <div class="stat-value">89,400</div>
          <div class="stat-desc">↗︎ 400 (22%)</div>
        </div>
      </div>
      <div class="stats shadow">
        <div class="stat">
          <div class="stat-title">Revenue</div>
          <div class="stat-value">$89,400</div>
          <div class="stat-desc">↗︎ 400 (22%)</div>
        </div>
      </div>
    </div>
    <div class="grid grid-cols-1 lg:grid-cols-2 gap-6">
      <div class="card bg-base-100 shadow-xl">
        <div class="card-body">
          <h2 class="card-title">Analytics Chart</h2>
          <div class="h-64 bg-gradient-to-r from-purple-200 to-pink-200 rounded-lg flex items-center justify-center">
            <span class="text-gray-500">Chart Placeholder</span>
          </div>
        </div>
      </div>
      <div class="card bg-base-100 shadow-xl">
        <div class="card-body">
          <h2 class="card-title">Recent Activity</h2>
          <div class="space-y-4">
            <div class="flex items-center space-x-4">
              <div class="avatar placeholder">
                <div class="bg-neutral text-neutral-content rounded-full w-8">
                  <span class="text-xs">U</span>
                </div>
              </div>
              <div>
                <p class="text-sm">User activity here</p>
                <p class="text-xs text-gray-500">2 hours ago</p>
              </div>
            </div>
          </div>
        </div>
      </div>
    </div>
  </div>
</div>""",
    "landing": """<div class="min-h-screen bg-gradient-to-b from-blue-600 to-purple-700">
  <div class="container mx-auto px-6 py-12">
    <div class="text-center text-white mb-16">
      <h1 class="text-6xl font-bold mb-6">Welcome to Innovation</h1>
      <p class="text-xl mb-8 opacity-90">Transform your workflow with cutting-edge technology</p>
      <div class="flex justify-center space-x-4">
        <Button class="bg-white text-blue-600 hover:bg-gray-100">Get Started</Button>
        <Button variant="outline" class="border-white text-white hover:bg-white hover:text-blue-600">Learn More</Button>
      </div>
    </div>
    <div class="grid grid-cols-1 md:grid-cols-3 gap-8">
      <div class="bg-white/10 backdrop-blur-sm rounded-lg p-6 text-white">
        <div class="w-12 h-12 bg-white/20 rounded-lg flex items-center justify-center mb-4">
          <span class="text-2xl">🚀</span>
        </div>
        <h3 class="text-xl font-semibold mb-2">Fast Performance</h3>
        <p class="opacity-90">Lightning-fast loading and smooth interactions</p>
      </div>
      <div class="bg-white/10 backdrop-blur-sm rounded-lg p-6 text-white">
        <div class="w-12 h-12 bg-white/20 rounded-lg flex items-center justify-center mb-4">
          <span class="text-2xl">🔒</span>
        </div>
        <h3 class="text-xl font-semibold mb-2">Secure & Reliable</h3>
        <p class="opacity-90">Enterprise-grade security you can trust</p>
      </div>
      <div class="bg-white/10 backdrop-blur-sm rounded-lg p-6 text-white">
        <div class="w-12 h-12 bg-white/20 rounded-lg flex items-center justify-center mb-4">
          <span class="text-2xl">🎨</span>
        </div>
        <h3 class="text-xl font-semibold mb-2">Beautiful Design</h3>
        <p class="opacity-90">Stunning visuals that engage your users</p>
      </div>
    </div>
  </div>
</div>""",
}


TEMPLATE_CATALOG = {
    "layout": ["hero", "navbar", "sidebar", "footer", "grid", "flex"],
    "component": ["button", "card", "form", "modal", "dropdown", "tabs"],
    "page": ["dashboard", "landing", "profile", "settings", "login"],
    "all": ["hero", "navbar", "sidebar", "footer", "button", "card", "form", "dashboard", "landing"],
}
