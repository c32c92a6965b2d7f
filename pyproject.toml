[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mewshell"
version = "0.1.0"
description = "A small interactive Unix-style shell with pipes, redirections, here-documents and builtins"
requires-python = ">=3.10"
keywords = ["shell", "command-line", "pipeline", "repl", "heredoc"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mewshell = "mewshell.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["mewshell"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
