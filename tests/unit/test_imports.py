"""
SMOKE TESTS - Module Import Validation

These tests verify that all core modules can be imported without errors.
They catch issues like:
- Missing imports
- Undefined variables (logger not defined)
- Circular imports

If these fail, DO NOT DEPLOY.
"""


class TestModuleImports:
    """Verify all critical modules can be imported."""

    def test_import_main(self):
        """Main FastAPI app must import without errors."""
        import main
        assert hasattr(main, 'app')

    def test_import_models(self):
        """Database models must import."""
        import models
        assert hasattr(models, 'SystemConfig')
        assert hasattr(models, 'AnalysisRun')

    def test_import_schemas(self):
        import schemas
        assert hasattr(schemas, 'ModeToggleRequest')

    def test_import_database(self):
        """Database connection must import."""
        import database
        assert hasattr(database, 'AsyncSessionLocal')

    def test_import_autonomy_package(self):
        import autonomy
        for name in autonomy.__all__:
            assert hasattr(autonomy, name), name

    def test_import_scheduler(self):
        import scheduler
        assert hasattr(scheduler, 'start_scheduler')


class TestRoutes:
    """Every documented endpoint is mounted."""

    def test_routes_registered(self):
        from main import app

        routes = {(method, route.path) for route in app.routes for method in getattr(route, "methods", ())}
        expected = {
            ("GET", "/api/agent-config"),
            ("POST", "/api/agent-config/autonomous-mode"),
            ("POST", "/api/agent-config/prod-mode"),
            ("POST", "/api/agent-config/simulation-mode"),
            ("PUT", "/api/agent-config/thresholds"),
            ("POST", "/api/agent-config/evaluate"),
            ("GET", "/api/mode/prod"),
            ("POST", "/api/mode/prod"),
            ("POST", "/api/analysis/run"),
            ("GET", "/api/analysis/runs"),
            ("GET", "/api/system-config"),
            ("POST", "/api/system-config"),
            ("GET", "/api/system-config/{key}"),
            ("PUT", "/api/system-config/{key}"),
            ("GET", "/health"),
        }
        assert expected <= routes
