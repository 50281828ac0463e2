[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mocapgraph"
version = "0.1.0"
description = "Acclaim ASF/AMC motion capture loading, forward kinematics, motion blending and motion graphs"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["motion capture", "asf", "amc", "kinematics", "motion graph", "animation", "quaternion"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mocapgraph"]

[tool.pytest.ini_options]
addopts = "-ra"
