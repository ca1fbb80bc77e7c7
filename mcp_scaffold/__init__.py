"""mcp-scaffold -- adds components to generated MCP server projects.

Quick usage::

    from mcp_scaffold.orchestrator import AddComponentOrchestrator, AddComponentRequest
    from mcp_scaffold.project import ComponentKind

    request = AddComponentRequest(kind=ComponentKind.TOOL, name="weather")
    result = await AddComponentOrchestrator().run("./my-server", request)
"""

__version__ = "0.1.0"
