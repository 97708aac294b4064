# command-line shell around catalog_core
