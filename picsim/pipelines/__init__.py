"""
End-to-end simulation pipelines
"""

from .scenarios import ScenarioConfig, ScenarioPipeline, default_scenarios

__all__ = ['ScenarioConfig', 'ScenarioPipeline', 'default_scenarios']
