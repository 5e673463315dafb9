"""I/O operations for monolith-kit.

Import from submodules:
- registry: RegistryLoader, parse_registry
- state: load_project_config, save_project_config, find_project_root
- env_file: configure_env_variables
"""
