"""
压缩包读取

从模组或存档的 zip 内容中提取指定条目。
"""

import io
import json
import re
import zipfile
from typing import Any

from modportal.exceptions import ArchiveError


INFO_JSON = r"info\.json$"
LEVEL_INIT = r"level-init\.dat$"


def extract_entry(raw: bytes, pattern: str) -> bytes:
    """
    提取第一个名称匹配正则的条目

    Args:
        raw: zip 文件的二进制内容
        pattern: 条目名称正则

    Returns:
        条目内容
    """
    regex = re.compile(pattern)
    try:
        with zipfile.ZipFile(io.BytesIO(raw)) as z:
            for entry in z.namelist():
                if regex.search(entry):
                    return z.read(entry)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        raise ArchiveError(f"无法读取压缩包: {e}", context={"pattern": pattern}) from e

    raise ArchiveError(f"压缩包中缺少条目: {pattern}", context={"pattern": pattern})


def read_json_entry(raw: bytes, pattern: str = INFO_JSON) -> Any:
    """提取条目并按 JSON 解析"""
    data = extract_entry(raw, pattern)
    try:
        return json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ArchiveError(
            f"条目不是有效的 JSON: {e}", context={"pattern": pattern}
        ) from e
