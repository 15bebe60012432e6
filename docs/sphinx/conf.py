# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for the rpcgen documentation."""

project = "rpcgen"
author = "RpcGen Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]
autodoc_typehints = "description"

html_theme = "alabaster"
