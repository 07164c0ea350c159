from setuptools import setup, find_packages

setup(
    name="k8sx",
    version="0.1.0",
    description="Recherche de pods et services Kubernetes par IP ou par nom, multi-contextes",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi>=0.104.1",
        "uvicorn>=0.24.0",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "python-dotenv>=1.0.0",
        "kubernetes>=28.1.0,<37",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.3",
            "httpx>=0.25.2",
        ],
    },
    entry_points={
        "console_scripts": [
            "k8sx=k8sx.cli:main",
        ],
    },
    python_requires=">=3.11",
)
