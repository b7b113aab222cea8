from model import PipelineSpec


def render(pipeline: PipelineSpec, fmt: str = "text") -> str:
    """
    Однострочная схема пайплайна, например:
    [GitHubSource, BaseImage] -> [CodeBuild] -> [DeployTest] -> [DeployProd]

    Действия с разным run_order внутри стадии разделяются через " > ".
    """
    parts = []
    for stage in pipeline.stages:
        groups = {}
        for action in stage.actions:
            groups.setdefault(action.run_order, []).append(action.name)
        body = " > ".join(", ".join(groups[order]) for order in sorted(groups))
        parts.append(f"[{body}]")
    return f"{pipeline.name}: " + " -> ".join(parts)
