from dataclasses import dataclass
from typing import TypeVar

from pydantic import TypeAdapter
from claimy.serializers.serializer import Serializer

T = TypeVar("T")


@dataclass
class PydanticSerializer(Serializer[T]):
    type_adapter: TypeAdapter[T]
    by_alias: bool = True
    indent: int | None = 2

    def serialize(self, obj: T) -> bytes:
        result = self.type_adapter.dump_json(
            obj, by_alias=self.by_alias, indent=self.indent
        )
        return result

    def deserialize(self, data: bytes) -> T:
        result = self.type_adapter.validate_json(data)
        return result
