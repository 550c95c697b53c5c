"""
웹 서버 실행 스크립트
백엔드 API 서버를 시작합니다.
"""

import sys

import uvicorn


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    port = int(argv[0]) if argv else 8000

    print("=" * 60)
    print("  Round Robin 작업 디스패처 - 웹 서버")
    print("=" * 60)
    print()
    print("백엔드 서버를 시작합니다...")
    print(f"API 문서: http://localhost:{port}/docs")
    print()
    print("종료하려면 Ctrl+C를 누르세요.")
    print("-" * 60)

    uvicorn.run("web.backend.app:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
