"""Pydantic schemas for route tables, menus and API payloads."""

from .rights import (
    RouteDeclaration,
    RouteTable,
    MenuEntry,
    MenuSection,
    MenuDefinition,
    RuleResponse,
    AccessCheckRequest,
    AccessCheckResponse,
    GrantRowSchema,
    ProvisionRequest,
    PrincipalResponse,
)

__all__ = [
    "RouteDeclaration", "RouteTable",
    "MenuEntry", "MenuSection", "MenuDefinition",
    "RuleResponse", "AccessCheckRequest", "AccessCheckResponse",
    "GrantRowSchema", "ProvisionRequest", "PrincipalResponse",
]
