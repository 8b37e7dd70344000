"""
React + Vite scaffold the generated files are layered onto
"""

import json
from typing import Dict, Iterable

from ..models import GeneratedFile


def react_project_files(project_name: str, port: int = 3000) -> Dict[str, str]:
    """Relative path -> file contents of a minimal React/Vite project"""
    package_json = {
        "name": project_name,
        "version": "1.0.0",
        "type": "module",
        "scripts": {
            "dev": "vite",
            "build": "vite build",
            "preview": "vite preview",
        },
        "dependencies": {
            "react": "^18.2.0",
            "react-dom": "^18.2.0",
        },
        "devDependencies": {
            "@types/react": "^18.2.15",
            "@types/react-dom": "^18.2.7",
            "@vitejs/plugin-react": "^4.0.3",
            "typescript": "^5.0.2",
            "vite": "^4.4.5",
        },
    }

    tsconfig = {
        "compilerOptions": {
            "target": "ES2020",
            "useDefineForClassFields": True,
            "lib": ["ES2020", "DOM", "DOM.Iterable"],
            "module": "ESNext",
            "skipLibCheck": True,
            "moduleResolution": "bundler",
            "allowImportingTsExtensions": True,
            "resolveJsonModule": True,
            "isolatedModules": True,
            "noEmit": True,
            "jsx": "react-jsx",
            "strict": True,
        },
        "include": ["src"],
        "references": [{"path": "./tsconfig.node.json"}],
    }

    tsconfig_node = {
        "compilerOptions": {
            "composite": True,
            "skipLibCheck": True,
            "module": "ESNext",
            "moduleResolution": "bundler",
            "allowSyntheticDefaultImports": True,
        },
        "include": ["vite.config.ts"],
    }

    return {
        "package.json": json.dumps(package_json, indent=2),
        "index.html": f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{project_name}</title>
</head>
<body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
</body>
</html>
""",
        "vite.config.ts": f"""import {{ defineConfig }} from 'vite'
import react from '@vitejs/plugin-react'

export default defineConfig({{
  plugins: [react()],
  server: {{
    port: {port},
    host: true
  }}
}})
""",
        "tsconfig.json": json.dumps(tsconfig, indent=2),
        "tsconfig.node.json": json.dumps(tsconfig_node, indent=2),
        "src/main.tsx": """import React from 'react'
import ReactDOM from 'react-dom/client'
import App from './App'
import './index.css'

ReactDOM.createRoot(document.getElementById('root')!).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>,
)
""",
        "src/App.tsx": f"""function App() {{
  return (
    <div style={{{{ padding: '20px', fontFamily: 'Arial, sans-serif' }}}}>
      <h1>Welcome to {project_name}</h1>
      <p>Your React app is running!</p>
    </div>
  )
}}

export default App
""",
        "src/index.css": """body {
  margin: 0;
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif;
  -webkit-font-smoothing: antialiased;
}

* {
  box-sizing: border-box;
}
""",
    }


def normalize_path(path: str) -> str:
    normalized = path.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


def merge_manifest(template: Dict[str, str], files: Iterable[GeneratedFile]) -> Dict[str, str]:
    """Generated files replace template entries with the same path"""
    merged = dict(template)
    for generated in files:
        merged[normalize_path(generated.path)] = generated.content
    return merged
