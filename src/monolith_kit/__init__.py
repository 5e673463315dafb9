"""monolith-kit: Module scaffolding for Elysia-style TypeScript projects.

Import from submodules:
- version: __version__
- operations.install: ModuleInstaller (install a module into a project)
- io.registry: RegistryLoader (load the module catalog)
"""

from monolith_kit.version import __version__ as __version__
