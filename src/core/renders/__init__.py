from . import cloudformation, diagram

RENDERS = {
    "cloudformation": cloudformation.render,
    "diagram": diagram.render,
}

__all__ = ["RENDERS", "cloudformation", "diagram"]
