"""Settings package for the chalet booking project.

The `base.py` module contains configuration shared across environments.
`dev.py`, `prod.py` and `test.py` extend it with environment specific
overrides.
"""
