"""
Puertos hacia sistemas externos (Notion, transcodificador, renderer).
"""
