pytest_plugins = ["fluidharness.testing.conftest"]
