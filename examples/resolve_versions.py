from pathlib import Path

from codegame.cggenevents import install_cg_gen_events, latest_cge_version, parse_cge_version
from codegame.config import Dirs
from codegame.external.cache import GithubCache
from codegame.external.github import library_version_from_cg_version

########################################################
### Example step-by-step version resolution
########################################################

# keep everything in a local directory instead of the XDG locations
root = Path(".codegame-example")
dirs = Dirs(cache_dir=root / "cache", data_dir=root / "data", config_dir=root / "config")
cache = GithubCache(dirs=dirs)

# newest CGE version ('x.y')
print(latest_cge_version(cache))

# version declared by a CGE file
cge_version = parse_cge_version("/* demo */\nname demo\nversion 0.4\n")
print(cge_version)

# install the matching cg-gen-events release (skipped if present)
exe_name = install_cg_gen_events(cge_version, dirs=dirs, cache=cache)
print(dirs.cg_gen_events_dir / exe_name)

# client library version for this CGE version ('latest' if unknown)
print(library_version_from_cg_version("code-game-project", "go-client", cge_version, cache))
