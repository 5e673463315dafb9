"""Data models for monolith-kit.

Import from submodules:
- registry: ModuleDescriptor, FileSpec, FileSet, Registration, Registry
- config: AppConfig, InstalledModule, ProjectConfig
- install: InstallTarget, FileOperationResult, InjectionResult, InstallResult
"""
