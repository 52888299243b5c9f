from .render import RenderOptions, render

__all__ = ["RenderOptions", "render"]
