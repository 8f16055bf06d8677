"""Top-risk clustering: select top-scoring rows, cluster them, compare with the population."""
from risk_clustering.errors import DegenerateColumn, InvalidInput, ReportingDegraded
from risk_clustering.pipeline import run

__all__ = ['run', 'InvalidInput', 'DegenerateColumn', 'ReportingDegraded']
__version__ = '0.1.0'
