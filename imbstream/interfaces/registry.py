from enum import Enum
from typing import Any, Dict, List, Type, TypeVar, Generic, Union

T = TypeVar('T')

class Registry(Generic[T]):
    """Maps selector names (plain strings or str-valued enums) to component classes."""

    def __init__(self, base_type: Type[T], kind: str = "component"):
        self._base_type = base_type
        self._kind = kind
        self._registry: Dict[str, Type[T]] = {}

    @staticmethod
    def _key(name: Union[str, Enum]) -> str:
        if isinstance(name, Enum):
            name = name.value
        return str(name).lower()

    def register(self, name: Union[str, Enum], cls: Type[T]) -> None:
        if not issubclass(cls, self._base_type):
            raise TypeError(f"{cls.__name__} is not a subtype of {self._base_type.__name__}")
        self._registry[self._key(name)] = cls

    def get(self, name: Union[str, Enum]) -> Type[T]:
        key = self._key(name)
        if key not in self._registry:
            raise KeyError(f"No {self._kind} registered with name '{key}'")
        return self._registry[key]

    def create(self, name: Union[str, Enum], *args: Any, **kwargs: Any) -> T:
        cls = self.get(name)
        return cls(*args, **kwargs)

    def list_registered(self) -> List[str]:
        return list(self._registry.keys())

    def __contains__(self, name: Union[str, Enum]) -> bool:
        return self._key(name) in self._registry
