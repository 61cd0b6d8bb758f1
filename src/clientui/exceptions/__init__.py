# clientui/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py          # ClassifiableFailure (raw transport failure), PageActionFailed (+ page context)
# │   └── classifier.py    # status/body/operation -> ClassifiedError

from .base import ClientUIError, ClassifiableFailure, PageActionFailed
from .classifier import classify, classify_failure

__all__ = [
    "ClientUIError",
    "ClassifiableFailure",
    "PageActionFailed",
    "classify",
    "classify_failure",
]
