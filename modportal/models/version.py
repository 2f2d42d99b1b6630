"""
版本模型

点分版本号的解析、补齐与比较（major.minor.patch）。
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from modportal.exceptions import ValidationError


@dataclass(frozen=True, order=True)
class Version:
    """三段式版本号，不足三段时右侧补 0"""

    major: int = 0
    minor: int = 0
    patch: int = 0

    WILDCARD: ClassVar["Version"]

    @classmethod
    def parse(cls, value: Union[str, "Version"]) -> "Version":
        """
        解析版本字符串

        "0.14" 与 "0.14.0" 解析为同一个版本，允许前缀 "v"。
        """
        if isinstance(value, Version):
            return value

        text = str(value).strip()
        if text[:1] in ("v", "V"):
            text = text[1:]

        parts = text.split(".")
        if not text or len(parts) > 3:
            raise ValidationError(
                f"无效的版本号: {value!r}", context={"version": str(value)}
            )

        numbers = []
        for part in parts:
            if not part.isdecimal():
                raise ValidationError(
                    f"无效的版本号: {value!r}", context={"version": str(value)}
                )
            numbers.append(int(part))

        while len(numbers) < 3:
            numbers.append(0)

        return cls(*numbers)

    @property
    def is_wildcard(self) -> bool:
        return self == Version.WILDCARD

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


Version.WILDCARD = Version(0, 0, 0)
