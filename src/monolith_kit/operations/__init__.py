"""Installation engine operations.

Import from submodules:
- resolve: resolve_dependencies, install_order
- targets: select_targets
- materialize: materialize_file, render_template
- dependencies: detect_package_manager, install_dependencies
- inject: register_files, unregister_files
- hooks: run_hooks
- install: ModuleInstaller
- update: check_for_updates, apply_update
- remove: remove_installed_module, find_dependents
"""
