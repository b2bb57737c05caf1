"""
日志消息模板模块
统一管理存储层的日志消息模板，便于维护和检索
"""

from typing import Dict, Any


class LogMessages:
    """日志消息模板类"""

    # ==================== 通用日志消息 ====================
    OPERATION_SUCCESS = "操作成功完成: {operation_name}"
    OPERATION_FAILED = "操作执行失败: {operation_name}"

    # ==================== 存储桶管理 ====================
    BUCKET_INIT_START = "开始初始化存储桶"
    BUCKET_INIT_COMPLETE = "存储桶初始化完成: 新建 {created} 个, 已存在 {existing} 个, 失败 {failed} 个"
    BUCKET_CREATE_FAILED = "创建存储桶失败"

    # ==================== 文件操作 ====================
    FILE_UPLOAD_SUCCESS = "文件上传成功"
    FILE_VALIDATION_FAILED = "文件验证失败"
    FILE_DOWNLOAD_SAVED = "文件已保存到本地"

    # ==================== URL生成 ====================
    SIGNED_URL_REFRESH_SCHEDULED = "已安排签名URL刷新，{delay} 秒后执行"

    # ==================== 状态管理 ====================
    HOOK_STATE_CHANGED = "状态变更: {status}"
    HOOK_CANCELLED = "操作已取消"

    @classmethod
    def format_message(cls, message_template: str, **kwargs: Any) -> str:
        """格式化日志消息模板"""
        return message_template.format(**kwargs)

    @classmethod
    def get_structured_data(cls, **kwargs: Any) -> Dict[str, Any]:
        """获取结构化日志数据"""
        return kwargs


# 全局实例
log_messages = LogMessages()
