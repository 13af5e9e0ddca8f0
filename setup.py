from pathlib import Path
from setuptools import setup

root_dir = Path(__file__).parent
with open(root_dir / "README.md") as f:
    readme = f.read()

extras_require = {
    "dev": ["pytest", "nox", "ruff", "mypy"],
}

setup(
    name="pdfcanvas",
    version="0.1.0",
    packages=["pdfcanvas"],
    package_data={"pdfcanvas": ["py.typed"]},
    install_requires=[
        "pdfminer.six >= 20240706",
    ],
    extras_require=extras_require,
    description="Replay PDF page drawing operators onto a 2D canvas surface",
    long_description=readme,
    long_description_content_type="text/markdown",
    license="MIT",
    scripts=[
        "tools/pdf2canvas.py",
    ],
    keywords=[
        "pdf renderer",
        "pdf content stream",
        "canvas",
    ],
    python_requires=">=3.10",
    classifiers=[
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: 3 :: Only",
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: Multimedia :: Graphics",
    ],
)
