# Licensed under the GPLv3 - see LICENSE
"""Show the versions of numpy and astropy in the pytest header."""
try:
    from pytest_astropy_header.display import (PYTEST_HEADER_MODULES,
                                               TESTED_VERSIONS)
except ImportError:
    pass
else:
    def pytest_configure(config):
        config.option.astropy_header = True
        PYTEST_HEADER_MODULES.clear()
        PYTEST_HEADER_MODULES.update(Numpy='numpy', Astropy='astropy')

        from . import __version__
        TESTED_VERSIONS['pngchunk'] = __version__ or 'from source'
