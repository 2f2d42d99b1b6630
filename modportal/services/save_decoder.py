"""
存档模组列表解析

level-init.dat 记录布局：
- 偏移 48：模组数量（u8）
- 自偏移 52 起，每个模组依次为：
  名称长度（u8）、名称（UTF-8）、版本 major/minor/patch（各 u8）、4 字节未知数据
"""

import struct
from typing import List

from modportal.exceptions import MalformedRecordError
from modportal.models import SaveModEntry, Version
from modportal.services.archive import LEVEL_INIT, extract_entry


MOD_COUNT_OFFSET = 48
FIRST_ENTRY_OFFSET = 52
RESERVED_SIZE = 4

_VERSION = struct.Struct(">BBB")


def _require(buffer: bytes, start: int, size: int) -> None:
    if start + size > len(buffer):
        raise MalformedRecordError(
            f"记录长度不足: 需要 {start + size} 字节，实际 {len(buffer)} 字节",
            context={"offset": start, "size": size, "length": len(buffer)},
        )


def decode_mod_list(buffer: bytes) -> List[SaveModEntry]:
    """
    解析存档模组列表记录

    Args:
        buffer: level-init.dat 的内容

    Returns:
        按记录顺序排列的模组列表
    """
    _require(buffer, MOD_COUNT_OFFSET, 1)
    mod_count = buffer[MOD_COUNT_OFFSET]

    mods = []
    pos = FIRST_ENTRY_OFFSET
    for _ in range(mod_count):
        _require(buffer, pos, 1)
        length = buffer[pos]

        _require(buffer, pos + 1, length + _VERSION.size + RESERVED_SIZE)
        name_bytes = bytes(buffer[pos + 1 : pos + 1 + length])
        try:
            name = name_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedRecordError(
                f"模组名称不是有效的 UTF-8: {name_bytes!r}", context={"offset": pos}
            ) from e

        version_offset = pos + 1 + length
        major, minor, patch = _VERSION.unpack_from(buffer, version_offset)
        reserved_offset = version_offset + _VERSION.size
        reserved = bytes(buffer[reserved_offset : reserved_offset + RESERVED_SIZE])

        mods.append(
            SaveModEntry(
                name=name, version=Version(major, minor, patch), reserved=reserved
            )
        )

        pos += length + 8

    return mods


class SaveArchiveDecoder:
    """存档解析器"""

    def decode(self, buffer: bytes) -> List[SaveModEntry]:
        return decode_mod_list(buffer)

    def read_save(self, raw: bytes) -> List[SaveModEntry]:
        """从存档 zip 内容中读取 level-init.dat 并解析"""
        return decode_mod_list(extract_entry(raw, LEVEL_INIT))
