"""
测试工具包
"""
