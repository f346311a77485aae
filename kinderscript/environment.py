from typing import Dict, Optional
from kinderscript.ast import FunctionDef
from kinderscript.types import Value


class Scope:
    """A scope environment mapping names to values and function definitions.

    Lookups walk the parent chain and the nearest binding wins. Writes always
    land in this scope; a scope never modifies its ancestors.
    """
    def __init__(self, parent: Optional['Scope'] = None):
        self.parent = parent
        self.values: Dict[str, Value] = {}
        self.functions: Dict[str, FunctionDef] = {}

    def child(self) -> 'Scope':
        return Scope(parent=self)

    def get(self, name: str) -> Optional[Value]:
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.values:
                return scope.values[name]
            scope = scope.parent
        return None

    def set(self, name: str, value: Value):
        self.values[name] = value

    def get_function(self, name: str) -> Optional[FunctionDef]:
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope.functions:
                return scope.functions[name]
            scope = scope.parent
        return None

    def define_function(self, function: FunctionDef):
        # redefinition replaces the previous binding
        self.functions[function.name] = function
