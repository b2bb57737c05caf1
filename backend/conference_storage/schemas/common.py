"""
通用Pydantic模型
用于标准化API响应
"""

from typing import Optional, Any
from pydantic import BaseModel


class StandardResponse(BaseModel):
    """标准化响应模型"""
    status: str = "success"
    message: str = ""
    data: Optional[Any] = None


class PaginationInfo(BaseModel):
    """分页信息模型"""
    limit: int
    offset: int
    has_more: bool
