"""Degraded payloads substituted when generated output does not match its JSON schema."""

from __future__ import annotations

import json
from typing import Any

FALLBACK_CSS = "/* Add your CSS here */"
FALLBACK_JS = "// Add your JavaScript here"

FALLBACK_PROJECT_DESCRIPTION = (
    "Fallback Next.js project. The generated output could not be parsed as a project "
    "bundle; the raw response is included in README.md."
)

_PACKAGE_JSON = {
    "name": "generated-app",
    "version": "0.1.0",
    "private": True,
    "scripts": {"dev": "next dev", "build": "next build", "start": "next start"},
    "dependencies": {"next": "14.0.0", "react": "^18", "react-dom": "^18"},
    "devDependencies": {
        "@types/node": "^20",
        "@types/react": "^18",
        "@types/react-dom": "^18",
        "tailwindcss": "^3.3.0",
        "typescript": "^5",
    },
}

_LAYOUT_TSX = """\
import './globals.css'
import type { Metadata } from 'next'

export const metadata: Metadata = {
  title: 'Generated App',
  description: 'Generated application',
}

export default function RootLayout({ children }: { children: React.ReactNode }) {
  return (
    <html lang="en">
      <body>{children}</body>
    </html>
  )
}
"""

_PAGE_TSX = """\
export default function Home() {
  return (
    <main className="min-h-screen flex items-center justify-center p-8">
      <div className="max-w-2xl text-center">
        <h1 className="text-3xl font-bold mb-4">Generated App</h1>
        <p className="text-gray-600">See README.md for the generated response.</p>
      </div>
    </main>
  )
}
"""

_GLOBALS_CSS = """\
@tailwind base;
@tailwind components;
@tailwind utilities;
"""


def fallback_files_bundle(raw_text: str) -> dict[str, Any]:
    """Deterministic minimal Next.js project carrying the raw response in its README."""
    return {
        "files": {
            "package.json": json.dumps(_PACKAGE_JSON, indent=2),
            "app/layout.tsx": _LAYOUT_TSX,
            "app/page.tsx": _PAGE_TSX,
            "app/globals.css": _GLOBALS_CSS,
            "README.md": f"# Generated App\n\n{raw_text}\n",
        },
        "description": FALLBACK_PROJECT_DESCRIPTION,
    }


def fallback_code_triple(raw_text: str) -> dict[str, Any]:
    return {"html": raw_text, "css": FALLBACK_CSS, "js": FALLBACK_JS}


def fallback_edit_bundle(raw_text: str) -> dict[str, Any]:
    return {"files": {}, "explanation": raw_text, "changes": []}
