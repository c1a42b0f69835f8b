import sys

from csvload.execution.config_executor import ConfigExecutor


def main():
    if len(sys.argv) != 2:
        print("Usage: csvload-run <config.yaml>")
        sys.exit(1)

    config_path = sys.argv[1]
    executor = ConfigExecutor(config_path)
    result = executor.execute()

    print("\n=== Execution Completed ===")
    print(f"Entity: {result.get('entity')}")
    print(f"Rows: {result.get('row_count')}")
    for col in result.get("columns", []):
        print(f"  {col.get('name')}: {col['type']} (width={col['max_width']}, nulls={col['null_count']})")

    if "load" in result:
        load = result["load"]
        print(f"Loaded: affected={load['affected']} selected={load['selected']}")


if __name__ == "__main__":
    main()
