#!/usr/bin/env python3
"""
Inicializa o banco DuckDB usado pela sincronização de conteúdo.

Cria as tabelas ``courses``, ``modules`` e ``lessons`` e, opcionalmente, as
popula a partir de arquivos CSV exportados do banco de produção
(``courses.csv``, ``modules.csv`` e ``lessons.csv`` no diretório informado).

Uso:
  python scripts/initialize_database.py --db data/courses.duckdb [--csv-dir docs/snapshot]
"""

import argparse
import os
import sys

import pandas as pd

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from course_sync.stores.content_store import open_store  # noqa: E402

COLUMNS = {
    'courses': ['id', 'title'],
    'modules': ['id', 'course_id', 'title', 'description', 'order_index'],
    'lessons': ['id', 'module_id', 'title', 'content', 'video_url'],
}
ID_COLUMNS = ('id', 'course_id', 'module_id')


def _read_table_csv(csv_path, table):
    """Lê um CSV e devolve apenas as colunas conhecidas da tabela, com IDs como texto."""
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    df.columns = [col.strip().lower() for col in df.columns]
    missing = [c for c in COLUMNS[table] if c not in df.columns]
    if missing:
        raise ValueError(f"O arquivo {csv_path} não possui as colunas {missing}")
    df = df[COLUMNS[table]].copy()
    for col in df.columns:
        if col in ID_COLUMNS or col == 'title':
            continue
        if col == 'order_index':
            df[col] = pd.to_numeric(df[col], errors='coerce').astype('Int64')
        else:
            # Campo vazio no CSV equivale a NULL no banco.
            df[col] = pd.Series([v if v != '' else None for v in df[col]], index=df.index, dtype=object)
    return df


def initialize_database(db_path, csv_dir=None):
    """
    Cria as tabelas (se ainda não existirem) e carrega os CSVs encontrados em ``csv_dir``.

    Tabelas que já possuem linhas não são recarregadas.

    Returns:
        dict: Quantidade de linhas inseridas por tabela.
    """
    inserted = {table: 0 for table in COLUMNS}
    store = open_store(db_path, create=True)
    try:
        if not csv_dir:
            return inserted
        for table in COLUMNS:
            csv_path = os.path.join(csv_dir, f'{table}.csv')
            if not os.path.exists(csv_path):
                print(f"Arquivo {csv_path} não encontrado; tabela '{table}' ignorada.")
                continue
            existing = store.con.execute(f'SELECT COUNT(*) FROM {table}').fetchone()[0]
            if existing:
                print(f"A tabela '{table}' já possui {existing} registros. Nenhuma ação foi tomada.")
                continue

            print(f'Lendo o arquivo CSV de: {csv_path}')
            df = _read_table_csv(csv_path, table)
            columns = ', '.join(COLUMNS[table])
            store.con.register('df_temp', df)
            try:
                store.con.execute(f'INSERT INTO {table} ({columns}) SELECT {columns} FROM df_temp')
            finally:
                store.con.unregister('df_temp')
            inserted[table] = len(df)
            print(f"Tabela '{table}' populada com {len(df)} registros.")
    finally:
        store.close()
        print('Conexão com o banco de dados fechada.')
    return inserted


def main():
    parser = argparse.ArgumentParser(description='Cria e popula o banco DuckDB de cursos.')
    parser.add_argument('--db', default='data/courses.duckdb', help='Arquivo DuckDB de destino.')
    parser.add_argument('--csv-dir', help='Diretório com courses.csv, modules.csv e lessons.csv.')
    args = parser.parse_args()
    initialize_database(args.db, args.csv_dir)


if __name__ == '__main__':
    main()
