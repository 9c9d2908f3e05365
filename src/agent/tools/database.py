"""
agent.tools.database - Read-only application statistics (mock data).

Only a fixed whitelist of query types is answered; anything else returns
the list of queries that are available.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

from agent.tools.base import BaseTool, ParameterDefinition
from domain.entities import utcnow

logger = logging.getLogger(__name__)

QueryType = Literal["user_count", "recent_messages", "system_stats", "generic"]

SAFE_QUERIES = ["public statistics", "user preferences", "system status"]


class DatabaseInput(BaseModel):
    query_type: QueryType
    filters: dict[str, Any] = Field(default_factory=dict)


class DatabaseTool(BaseTool):
    name = "database"
    description = "Query and retrieve data from the application database"
    parameters = {
        "query_type": ParameterDefinition(
            type="string",
            description="Type of database query to execute",
            enum=["user_count", "recent_messages", "system_stats", "generic"],
            required=True,
        ),
        "filters": ParameterDefinition(
            type="object",
            description="Optional filters for the query",
        ),
    }

    def get_schema(self) -> type[BaseModel]:
        return DatabaseInput

    async def run(self, args: DatabaseInput) -> dict[str, Any]:
        logger.info("Running database query %s", args.query_type)

        if args.query_type == "user_count":
            return {
                "metric": "user_count",
                "value": 1250,
                "description": "Total number of registered users",
            }

        if args.query_type == "recent_messages":
            now = utcnow().isoformat()
            messages = [
                {"id": 1, "user": "user123", "message": "Hello AI", "timestamp": now},
                {"id": 2, "user": "user456", "message": "What is the weather?", "timestamp": now},
            ]
            return {
                "messages": messages,
                "count": len(messages),
                "description": "Recent chat messages",
            }

        if args.query_type == "system_stats":
            return {
                "total_users": 1250,
                "active_sessions": 45,
                "messages_today": 892,
                "uptime": "5 days, 12 hours",
                "description": "System statistics overview",
            }

        return {
            "response": "Generic database query executed",
            "available_queries": list(SAFE_QUERIES),
            "filters": args.filters,
        }
