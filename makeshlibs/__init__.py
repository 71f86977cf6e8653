from .shlibs import DependencyMode, MakeshlibsConfig, resolve_dependency_mode
from .subcommands.makeshlibs import do_makeshlibs as makeshlibs
from .subcommands.makeshlibs import process_package
from .subcommands.provides import do_gen_provides as gen_provides
from .version import __version__
