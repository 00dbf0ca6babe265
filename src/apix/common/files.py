"""文件工具"""

import os
import posixpath
from pathlib import Path
from urllib.parse import urlsplit


def is_exist(path: str | Path) -> bool:
    """路径是否存在"""
    return os.path.exists(path)


def is_dir_exist(path: str | Path) -> bool:
    """路径存在且为目录"""
    return os.path.isdir(path)


def is_accessible(path: str | Path) -> bool:
    """路径可访问且可写"""
    try:
        os.stat(path)
    except OSError:
        return False
    return os.access(path, os.W_OK)


def file_name(name: str) -> str:
    """返回去掉扩展名的基础文件名，支持 URL

    >>> file_name("https://example.com/static/logo.png?x=1")
    'logo'
    """
    path = urlsplit(name).path if "://" in name else name
    base = posixpath.basename(path.replace("\\", "/"))
    stem, _ = posixpath.splitext(base)
    return stem


def file_ext(name: str) -> str:
    """返回扩展名（含点），支持 URL"""
    path = urlsplit(name).path if "://" in name else name
    return posixpath.splitext(posixpath.basename(path))[1]


def ensure_dir(path: str | Path) -> Path:
    """目录不存在时创建"""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


__all__ = [
    "ensure_dir",
    "file_ext",
    "file_name",
    "is_accessible",
    "is_dir_exist",
    "is_exist",
]
