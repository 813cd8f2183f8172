[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quadricmap"
version = "0.1.0"
description = "Object-level mapping with ellipsoids (dual quadrics) from RGB-D frames and 2D detections"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pyyaml",
]
keywords = [
    "slam",
    "ellipsoid",
    "quadric",
    "object-mapping",
    "rgb-d",
    "computer-vision",
    "geometry",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["quadricmap"]

[tool.hatch.build.targets.sdist]
include = [
    "quadricmap",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
