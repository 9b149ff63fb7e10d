"""Raw SQL queries against the block database."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from . import output
from .models import CommandError

logger = logging.getLogger(__name__)


def _cell(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).replace("\n", " ")


def run_query(
    client: Any, sql: str, output_file: str = "", raw: bool = False
) -> list[Mapping[str, Any]]:
    """Run a SQL statement, print the rows as a table or JSON and return them."""
    logger.info("执行SQL查询: %s", sql)
    stmt = sql.strip()
    if not stmt:
        print("❌ 错误: 请提供 SQL 语句")
        print("💡 使用方法: siyuan-cli query \"SELECT * FROM blocks WHERE type='d' LIMIT 10\"")
        raise CommandError("SQL 语句不能为空")

    try:
        results = list(client.query_sql(stmt))
    except Exception as err:
        print(f"❌ 查询失败: {err}")
        raise CommandError(f"查询失败: {err}") from err

    if output.is_json() or output_file or raw:
        data = {"sql": stmt, "count": len(results), "result": results}
        if output_file:
            output.write_json_file(data, output_file)
        else:
            output.print_json(data)
        return results

    if not results:
        print("查询结果为空")
        return results

    print(f"返回 {len(results)} 行:\n")
    keys = list(results[0].keys())
    rows = [[_cell(row.get(key)) for key in keys] for row in results]
    output.print_table(keys, rows)
    return results