"""Rich renderers for the projected view tree."""
