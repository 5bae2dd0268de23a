"""Set-up file for fluideq for installations usins ``pip install .``"""
from setuptools import find_packages, setup


with open("requirements.txt") as f:
    required = f.read().splitlines()


setup(
    name="fluideq",
    version="0.1.0",
    license="GPL",
    keywords=["equation of state thermodynamics phase equilibria"],
    install_requires=required,
    extras_require={"testing": ["pytest"]},
    description="Thermodynamic states and phase equilibria of fluids",
    platforms=["Linux", "Windows", "Mac OS-X"],
    package_data={
        "fluideq": ["py.typed"],
    },
    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    zip_safe=False,
)
