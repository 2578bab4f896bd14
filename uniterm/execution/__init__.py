"""
uniterm Execution Module

Sequential pipeline execution with redirections.
"""

from .pipeline_executor import PipelineExecutor

__all__ = ['PipelineExecutor']
