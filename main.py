"""
Inspector de paquetes Android
Extrae identidad, versión, SDKs, permisos, componentes e icono de APKs y XAPKs
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

from apk_inspector.preprocessing import InspectionError, PackageInspector, PackageLoader
from apk_inspector.utils.logger import setup_logging
from apk_inspector.utils.config_loader import load_config
from apk_inspector.utils.report_generator import ReportGenerator

DEFAULT_CONFIG_PATH = 'config/default_config.yaml'


class InspectionApp:
    """
    Coordina la inspección y la generación de reportes
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Args:
            config_path: Ruta al archivo de configuración YAML
        """
        self.config = load_config(config_path)
        self.logger = setup_logging(self.config['logging'])
        self.inspector = PackageInspector(self.config['inspection'])

    def inspect_package(self, package_path: str, output_dir: str = "results/") -> Dict:
        """
        Inspecciona un paquete y guarda su reporte

        Args:
            package_path: Ruta al APK o XAPK
            output_dir: Directorio para guardar resultados

        Returns:
            Diccionario con el resultado
        """
        try:
            result = self.inspector.inspect(package_path).to_dict()
        except InspectionError as e:
            return {'apk_path': package_path, 'error': str(e)}

        result['apk_path'] = package_path
        report_path = Path(output_dir) / f"{Path(package_path).stem}_report.json"
        ReportGenerator.generate(result, str(report_path))

        self.logger.info(f"Inspección completada. Reporte: {report_path}")
        return result

    def inspect_batch(self, input_dir: str, output_dir: str = "results/batch/") -> List[Dict]:
        """
        Inspecciona todos los paquetes de un directorio en el pool de hilos

        Args:
            input_dir: Directorio con APKs / XAPKs
            output_dir: Directorio para resultados

        Returns:
            Lista de resultados para cada paquete
        """
        loader = PackageLoader(Path(input_dir), self.config['inspection'].get('bundle_extensions'))
        packages = loader.load_dataset()
        self.logger.info(f"Inspeccionando {len(packages)} paquetes en modo batch...")

        results = self.inspector.inspect_many([p.path for p in packages])

        consolidated_path = Path(output_dir) / "consolidated_report.json"
        ReportGenerator.generate_consolidated(results, str(consolidated_path))

        self.logger.info(f"Inspección batch completada. Reporte: {consolidated_path}")
        return results

    def close(self) -> None:
        self.inspector.close()


def resolve_config_path(config_path: Optional[str]) -> Optional[str]:
    """Ruta explícita, o el YAML por defecto solo si existe en el directorio actual"""
    if config_path is not None:
        return config_path
    if Path(DEFAULT_CONFIG_PATH).exists():
        return DEFAULT_CONFIG_PATH
    return None


def main():
    """Punto de entrada principal"""
    parser = argparse.ArgumentParser(
        description="Inspector de paquetes Android (APK / XAPK)"
    )

    subparsers = parser.add_subparsers(dest='command', help='Comandos disponibles')

    inspect_parser = subparsers.add_parser('inspect', help='Inspeccionar un paquete')
    inspect_parser.add_argument('--apk', required=True, help='Ruta al archivo APK o XAPK')
    inspect_parser.add_argument('--output', default='results/', help='Directorio de salida')
    inspect_parser.add_argument('--config', default=None,
                                help=f'Archivo de configuración (por defecto {DEFAULT_CONFIG_PATH} si existe)')

    batch_parser = subparsers.add_parser('batch', help='Inspección batch de un directorio')
    batch_parser.add_argument('--input', required=True, help='Directorio con paquetes')
    batch_parser.add_argument('--output', default='results/batch/', help='Directorio de salida')
    batch_parser.add_argument('--config', default=None,
                              help=f'Archivo de configuración (por defecto {DEFAULT_CONFIG_PATH} si existe)')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    app = InspectionApp(resolve_config_path(args.config))

    try:
        if args.command == 'inspect':
            result = app.inspect_package(args.apk, args.output)
            if 'error' in result:
                sys.exit(1)
        elif args.command == 'batch':
            app.inspect_batch(args.input, args.output)
    finally:
        app.close()


if __name__ == "__main__":
    main()
