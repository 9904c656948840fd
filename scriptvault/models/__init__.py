"""Records persisted in the object store (serialized as JSON)."""

from scriptvault.models.access_code import AccessCode
from scriptvault.models.script import ScriptMetadata
from scriptvault.models.user import AdminSeed, Role, User

__all__ = ["AccessCode", "AdminSeed", "Role", "ScriptMetadata", "User"]
