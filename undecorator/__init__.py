"""
undecorator - migrate MobX decorators to decorator-free code

Rewrites JavaScript and TypeScript classes that use ``@observable``,
``@computed``, ``@action`` or the legacy ``decorate(Class, {...})`` call into
equivalent code without decorators. Untouched code is reproduced exactly.
"""

__version__ = "0.1.0"

# Only expose version by default - everything else is lazy loaded
__all__ = [
    "__version__",
    "transform_source",
    "TransformResult",
    "TransformStatus",
    "TransformOptions",
    "UndecorateConfig",
    "UndecorateRunner",
    "RunReport",
]


def __getattr__(name):
    """Lazy loading of the public API so the CLI starts without parsing grammars."""
    if name in {"transform_source", "TransformResult", "TransformStatus"}:
        from .codemod.pipeline import TransformResult, TransformStatus, transform_source

        return {
            "transform_source": transform_source,
            "TransformResult": TransformResult,
            "TransformStatus": TransformStatus,
        }[name]

    if name in {"TransformOptions", "UndecorateConfig"}:
        from .config import TransformOptions, UndecorateConfig

        return {"TransformOptions": TransformOptions, "UndecorateConfig": UndecorateConfig}[name]

    if name in {"UndecorateRunner", "RunReport"}:
        from .runner import RunReport, UndecorateRunner

        return {"UndecorateRunner": UndecorateRunner, "RunReport": RunReport}[name]

    raise AttributeError(f"module 'undecorator' has no attribute '{name}'")
