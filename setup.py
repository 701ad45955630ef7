from setuptools import setup  # ignore: type

setup(
    name="stack_status_migration",
    version="1.0.0",
    description="One-time migration that adds status mappings to the stacks index and derives each stack's status "
                "with an asynchronous update by query",
    py_modules=["document_store", "endpoint_info", "endpoint_utils", "exceptions", "mapping_updater",
                "migration_config", "stack_status", "stack_status_migration", "stack_status_migration_params",
                "task_monitor", "task_progress", "task_status", "utils"],
    install_requires=["requests", "requests-aws4auth", "botocore", "jsonpath-ng", "jsondiff", "pyyaml"],
    extras_require={
        "test": ["pytest", "coverage", "responses"],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: Apache Software License",
    ],
)
