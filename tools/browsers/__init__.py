"""Browsers domain - engine hosts and page primitives for e2e tests

_engine/   automation driver hosts (Playwright)
base_page  selector-level primitives page objects build on

Session lifecycle lives in core.session_lifecycle, not here.
"""
