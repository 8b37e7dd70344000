"""
aiteam - 多智能体应用生成系统

Turns one natural-language request into a task DAG, runs it across
specialized workers and integrates the results into a previewable project.
"""

__version__ = "0.1.0"
