"""Names the codemod recognizes and generates."""

LIBRARY_SOURCE = "mobx"
SUPPORTED_DECORATORS = ("action", "observable", "computed")
ACTION = "action"
OBSERVABLE = "observable"
COMPUTED = "computed"
BOUND = "bound"
LEGACY_FUNCTION = "decorate"
INITIALIZATION_HOOK = "initializeObservables"
DIAGNOSTIC_PREFIX = "[mobx:undecorate]"
