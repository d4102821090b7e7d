[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshviewer"
version = "0.1.0"
description = "Headless core of a 3D model viewer: OBJ mesh loading, trackball rotation, file browsing and render state"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "3d",
    "mesh",
    "obj",
    "wavefront",
    "trackball",
    "normals",
    "tangents",
    "viewer",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Rendering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["meshviewer"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
