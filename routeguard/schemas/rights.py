"""Route table, menu and rights schemas."""

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator
from typing import Optional, List, Dict, Any


class RouteDeclaration(BaseModel):
    """One entry of the route table.

    ``path`` is a template and may hold ``{name}`` placeholders.
    """
    path: str
    method: str = "GET"
    level_rights: List[int] = Field(default_factory=list)
    special_rights: Optional[str] = None
    special_rights_default: Optional[List[int]] = None

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Path cannot be empty")
        return v

    @field_validator('method')
    @classmethod
    def normalize_method(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Method cannot be empty")
        return v


class RouteTable(RootModel[List[RouteDeclaration]]):
    """Ordered route declarations; order decides matching precedence."""

    def __iter__(self):
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)


# -- Menu definition ----------------------------------------------------

class MenuEntry(BaseModel):
    """A menu item pointing at a page of the application."""
    model_config = ConfigDict(extra="allow")

    url: str


class MenuSection(BaseModel):
    """Top-level menu entry and its children."""
    model_config = ConfigDict(extra="allow")

    children: Dict[str, MenuEntry] = Field(default_factory=dict)

    @field_validator('children', mode='before')
    @classmethod
    def list_to_mapping(cls, v: Any) -> Any:
        """Children given as a JSON list are keyed by their position."""
        if isinstance(v, list):
            return {str(i): child for i, child in enumerate(v)}
        return v


class MenuDefinition(RootModel[Dict[str, MenuSection]]):
    """Whole menu file: menu key -> section."""

    def items(self):
        return self.root.items()


# -- API payloads -------------------------------------------------------

class RuleResponse(BaseModel):
    level_rights: List[int]
    special_rights: Optional[str] = None
    special_rights_default: Optional[List[int]] = None


class AccessCheckRequest(BaseModel):
    path: str
    method: str = "GET"
    action: str = "access"


class AccessCheckResponse(BaseModel):
    allowed: bool
    rule: Optional[RuleResponse] = None


class GrantRowSchema(BaseModel):
    access: bool = False
    read: bool = False
    write: bool = False
    delete: bool = False


class ProvisionRequest(BaseModel):
    menu: str = Field(..., description="Menu file name inside MENU_DIR")
    access_level: Optional[int] = Field(
        None, description="Level to provision for; defaults to the user's stored level"
    )


class PrincipalResponse(BaseModel):
    user_id: str
    access_level: int
    special_grants: Dict[str, GrantRowSchema]
