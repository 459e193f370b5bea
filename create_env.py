#!/usr/bin/env python3
"""
Script para crear el archivo .env con las variables necesarias
Uso: python create_env.py
"""

import os

ENV_CONTENT = """# Backend REST de la red de concesionarios
BACKEND_BASE_URL=http://localhost:8080/api
BACKEND_TIMEOUT_SECONDS=15

# Consola de administración
CORS_ORIGINS=http://localhost:5173,http://localhost:3000
MAX_OPEN_DRAFTS=200

# Registro
LOG_LEVEL=INFO
"""

def main():
    # Verificar si el archivo ya existe
    if os.path.exists('.env'):
        backup_path = '.env.backup'
        print(f"El archivo .env ya existe, creando backup en {backup_path}")
        try:
            with open('.env', 'r') as src, open(backup_path, 'w') as dst:
                dst.write(src.read())
        except OSError as e:
            print(f"Error al crear backup: {str(e)}")
            return 1
    
    # Crear el archivo .env
    try:
        with open('.env', 'w') as f:
            f.write(ENV_CONTENT)
        print("✅ Archivo .env creado exitosamente")
        print("Contenido:")
        for line in ENV_CONTENT.splitlines():
            print(f"  {line}")
        return 0
    except OSError as e:
        print(f"❌ Error al crear el archivo .env: {str(e)}")
        return 1

if __name__ == "__main__":
    raise SystemExit(main())
