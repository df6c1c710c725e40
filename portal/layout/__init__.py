from portal.layout.sidebar import NavItem, NavSection, Sidebar, build_sidebar


__all__ = ["NavItem", "NavSection", "Sidebar", "build_sidebar"]
