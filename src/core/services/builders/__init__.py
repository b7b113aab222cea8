from .deploy import add_deploy_stage, make_deploy_stage
from .pipeline import build_pipeline, summarize_pipeline
from .validation import check_artifacts

__all__ = [
    "add_deploy_stage",
    "make_deploy_stage",
    "build_pipeline",
    "summarize_pipeline",
    "check_artifacts",
]
