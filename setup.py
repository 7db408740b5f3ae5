from setuptools import setup, find_packages

setup(
    name="deep-skeleton-tracking",
    version="1.0.0",
    description="Camera image stream to OpenPose skeleton tracking adapter",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "opencv-python",
        "numpy",
        "onnxruntime",
        "kafka-python",
        "prometheus-client",
        "pydantic>=2.0.0",
        "pyyaml",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "black",
            "isort",
            "flake8",
        ]
    },
    entry_points={
        "console_scripts": [
            "skeleton-tracking=apps.skeleton_tracking_service.main:run",
            "skeleton-publish-frames=apps.skeleton_tracking_service.publish_frames:main",
        ]
    },
)
