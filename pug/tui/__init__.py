"""Terminal interface helpers: navigation, page cache, key bindings and rendering."""