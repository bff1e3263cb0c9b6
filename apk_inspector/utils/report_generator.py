"""
Generador de reportes de inspección de paquetes
"""

import html
import json
from pathlib import Path
from typing import Dict, List, Any
from datetime import datetime

COMPONENT_KEYS = ['permissions', 'activities', 'services', 'receivers', 'providers']


class ReportGenerator:
    """Genera reportes en JSON y HTML"""

    @staticmethod
    def generate(result: Dict[str, Any], output_path: str) -> None:
        """
        Genera reporte individual de un paquete

        Args:
            result: Metadatos del paquete (``PackageMetadata.to_dict()``)
            output_path: Ruta donde guardar el reporte
        """
        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        result = dict(result)
        result['timestamp'] = datetime.now().isoformat()

        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(result, f, indent=2, ensure_ascii=False)

        html_path = output_file.with_suffix('.html')
        ReportGenerator._generate_html(result, str(html_path))

    @staticmethod
    def generate_consolidated(results_list: List[Dict], output_path: str) -> None:
        """
        Genera reporte consolidado de varias inspecciones

        Args:
            results_list: Lista de resultados individuales
            output_path: Ruta donde guardar el reporte consolidado
        """
        consolidated = {
            'timestamp': datetime.now().isoformat(),
            'total_packages': len(results_list),
            'statistics': ReportGenerator._calculate_statistics(results_list),
            'results': results_list
        }

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(consolidated, f, indent=2, ensure_ascii=False)

    @staticmethod
    def _calculate_statistics(results_list: List[Dict]) -> Dict[str, Any]:
        """Calcula estadísticas agregadas"""
        inspected = [r for r in results_list if 'error' not in r]

        return {
            'inspected': len(inspected),
            'failed': len(results_list) - len(inspected),
            'with_icon': sum(1 for r in inspected if r.get('icon_base64')),
            'total_permissions': sum(len(r.get('permissions', [])) for r in inspected)
        }

    @staticmethod
    def _generate_html(result: Dict[str, Any], output_path: str) -> None:
        """Genera versión HTML del reporte"""
        icon = result.get('icon_base64')
        icon_html = f'<img class="icon" src="{icon}" alt="icon">' if icon else '<p>Sin icono</p>'

        rows = ''.join(
            f"<tr><th>{label}</th><td>{html.escape(str(result.get(key, '')))}</td></tr>"
            for label, key in [
                ('Package', 'package_name'),
                ('Versión', 'version_name'),
                ('Version code', 'version_code'),
                ('Min SDK', 'min_sdk_version'),
                ('Target SDK', 'target_sdk_version'),
                ('Compile SDK', 'compile_sdk_version'),
                ('Tamaño', 'file_size_readable'),
            ]
        )

        sections = ''
        for key in COMPONENT_KEYS:
            items = result.get(key, [])
            entries = ''.join(f"<li>{html.escape(item)}</li>" for item in items)
            sections += f"<h2>{key.capitalize()} ({len(items)})</h2><ul>{entries}</ul>"

        html_content = f"""
<!DOCTYPE html>
<html lang="es">
<head>
    <meta charset="UTF-8">
    <title>Reporte de Paquete - {html.escape(str(result.get('package_name', '')))}</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; background-color: #f5f5f5; }}
        .container {{ max-width: 1000px; margin: 0 auto; background: white; padding: 30px;
                      border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }}
        h1 {{ color: #333; border-bottom: 3px solid #007bff; padding-bottom: 10px; }}
        .icon {{ width: 96px; height: 96px; }}
        th {{ text-align: left; padding-right: 20px; color: #555; }}
        .timestamp {{ color: #888; font-size: 14px; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>Reporte de Inspección de Paquete</h1>
        <p class="timestamp">Generado: {result.get('timestamp', 'N/A')}</p>
        {icon_html}
        <table>{rows}</table>
        {sections}
    </div>
</body>
</html>
        """

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(html_content)
