"""Stack-specific starter files produced by the simulated generator."""

import json
import re

from appforge.contracts.files import CodeFile
from appforge.contracts.project import TechStack

REACT_APP_TEMPLATE = """import React from 'react'
import {{ BrowserRouter as Router, Routes, Route }} from 'react-router-dom'
import HomePage from './pages/HomePage'
import Dashboard from './pages/Dashboard'
import './App.css'

function App() {{
  return (
    <Router>
      <div className="min-h-screen bg-gray-50">
        <Routes>
          <Route path="/" element={{<HomePage />}} />
          <Route path="/dashboard" element={{<Dashboard />}} />
        </Routes>
      </div>
    </Router>
  )
}}

export default App
"""

REACT_HOME_TEMPLATE = """import React from 'react'

export default function HomePage() {{
  return (
    <div className="min-h-screen flex items-center justify-center">
      <div className="max-w-4xl mx-auto text-center px-4">
        <h1 className="text-4xl font-bold text-gray-900 mb-6">
          Welcome to {title}
        </h1>
        <p className="text-xl text-gray-600 mb-8">
          {summary}
        </p>
        <button className="bg-blue-600 text-white px-8 py-3 rounded-lg hover:bg-blue-700">
          Get Started
        </button>
      </div>
    </div>
  )
}}
"""

REACT_DASHBOARD_TEMPLATE = """import React, {{ useState }} from 'react'

interface Task {{
  id: string
  title: string
  completed: boolean
  createdAt: string
}}

export default function Dashboard() {{
  const [tasks, setTasks] = useState<Task[]>([])
  const [newTask, setNewTask] = useState('')

  const addTask = () => {{
    if (newTask.trim()) {{
      const task: Task = {{
        id: Date.now().toString(),
        title: newTask,
        completed: false,
        createdAt: new Date().toISOString()
      }}
      setTasks([...tasks, task])
      setNewTask('')
    }}
  }}

  const toggleTask = (id: string) => {{
    setTasks(tasks.map(task =>
      task.id === id ? {{ ...task, completed: !task.completed }} : task
    ))
  }}

  return (
    <div className="max-w-4xl mx-auto p-6">
      <h1 className="text-3xl font-bold mb-8">Dashboard</h1>
      <div className="flex gap-2 mb-6">
        <input
          value={{newTask}}
          onChange={{(e) => setNewTask(e.target.value)}}
          placeholder="Add a new task..."
          className="flex-1 px-4 py-2 border rounded-lg"
        />
        <button onClick={{addTask}} className="bg-blue-600 text-white px-6 py-2 rounded-lg">
          Add
        </button>
      </div>
      <ul className="space-y-2">
        {{tasks.map(task => (
          <li key={{task.id}} onClick={{() => toggleTask(task.id)}}>
            <span className={{task.completed ? 'line-through text-gray-500' : ''}}>
              {{task.title}}
            </span>
          </li>
        ))}}
      </ul>
    </div>
  )
}}
"""

EXPRESS_SERVER_TEMPLATE = """const express = require('express')
const cors = require('cors')
const tasks = require('./routes/tasks')

const app = express()
app.use(cors())
app.use(express.json())

app.get('/api/health', (req, res) => res.json({{ status: 'ok', app: '{slug}' }}))
app.use('/api/tasks', tasks)

const port = process.env.PORT || 3001
app.listen(port, () => console.log(`{title} API listening on ${{port}}`))
"""

EXPRESS_ROUTES_TEMPLATE = """const express = require('express')

const router = express.Router()
const tasks = []

router.get('/', (req, res) => res.json(tasks))

router.post('/', (req, res) => {
  const task = { id: Date.now().toString(), title: req.body.title, completed: false }
  tasks.push(task)
  res.status(201).json(task)
})

module.exports = router
"""

VUE_APP_TEMPLATE = """<template>
  <main class="min-h-screen flex items-center justify-center">
    <HelloWorld title="{title}" summary="{summary}" />
  </main>
</template>

<script setup lang="ts">
import HelloWorld from './components/HelloWorld.vue'
</script>
"""

VUE_MAIN_TEMPLATE = """import { createApp } from 'vue'
import App from './App.vue'

createApp(App).mount('#app')
"""

VUE_COMPONENT_TEMPLATE = """<template>
  <section class="max-w-4xl mx-auto text-center px-4">
    <h1 class="text-4xl font-bold mb-6">{{ title }}</h1>
    <p class="text-xl text-gray-600">{{ summary }}</p>
    <button @click="count++">Clicked {{ count }} times</button>
  </section>
</template>

<script setup lang="ts">
import { ref } from 'vue'

defineProps<{ title: string; summary: string }>()
const count = ref(0)
</script>
"""

NEXT_LAYOUT_TEMPLATE = """export const metadata = {{
  title: '{title}',
  description: '{summary}',
}}

export default function RootLayout({{ children }}: {{ children: React.ReactNode }}) {{
  return (
    <html lang="en">
      <body>{{children}}</body>
    </html>
  )
}}
"""

NEXT_PAGE_TEMPLATE = """import Link from 'next/link'

export default function Home() {{
  return (
    <main className="min-h-screen flex flex-col items-center justify-center">
      <h1 className="text-4xl font-bold mb-6">Welcome to {title}</h1>
      <p className="text-xl text-gray-600 mb-8">{summary}</p>
      <Link href="/dashboard">Open dashboard</Link>
    </main>
  )
}}
"""

NEXT_DASHBOARD_TEMPLATE = """export default function Dashboard() {
  return (
    <main className="max-w-4xl mx-auto p-6">
      <h1 className="text-3xl font-bold mb-8">Dashboard</h1>
    </main>
  )
}
"""

FASTAPI_MAIN_TEMPLATE = '''from fastapi import FastAPI

from app.routers import tasks

app = FastAPI(title="{title}", description="{summary}")
app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])


@app.get("/api/health")
async def health() -> dict:
    return {{"status": "ok", "app": "{slug}"}}
'''

FASTAPI_MODELS_TEMPLATE = """from pydantic import BaseModel


class TaskCreate(BaseModel):
    title: str


class Task(TaskCreate):
    id: int
    completed: bool = False
"""

FASTAPI_ROUTER_TEMPLATE = """from fastapi import APIRouter

from app.models import Task, TaskCreate

router = APIRouter()
_tasks: list[Task] = []


@router.get("/", response_model=list[Task])
async def list_tasks() -> list[Task]:
    return _tasks


@router.post("/", response_model=Task, status_code=201)
async def create_task(payload: TaskCreate) -> Task:
    task = Task(id=len(_tasks) + 1, title=payload.title)
    _tasks.append(task)
    return task
"""

README_TEMPLATE = """# {title}

{description}

Tech stack: {stack}
"""


def slugify(name: str) -> str:
    """``My Todo App`` -> ``my-todo-app``."""
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return slug or "app"


def _package_json(slug: str, dependencies: dict[str, str], scripts: dict[str, str]) -> str:
    return json.dumps(
        {
            "name": slug,
            "version": "1.0.0",
            "private": True,
            "dependencies": dependencies,
            "scripts": scripts,
        },
        indent=2,
    )


def _react_files(values: dict[str, str]) -> list[CodeFile]:
    return [
        CodeFile(
            path="src/App.tsx",
            language="typescript",
            content=REACT_APP_TEMPLATE.format(**values),
        ),
        CodeFile(
            path="src/pages/HomePage.tsx",
            language="typescript",
            content=REACT_HOME_TEMPLATE.format(**values),
        ),
        CodeFile(
            path="src/pages/Dashboard.tsx",
            language="typescript",
            content=REACT_DASHBOARD_TEMPLATE.format(**values),
        ),
        CodeFile(
            path="package.json",
            language="json",
            content=_package_json(
                values["slug"],
                {
                    "react": "^18.2.0",
                    "react-dom": "^18.2.0",
                    "react-router-dom": "^6.8.0",
                    "typescript": "^4.9.0",
                },
                {
                    "start": "react-scripts start",
                    "build": "react-scripts build",
                    "test": "react-scripts test",
                },
            ),
        ),
    ]


def _express_files(values: dict[str, str], prefix: str = "src") -> list[CodeFile]:
    return [
        CodeFile(
            path=f"{prefix}/index.js",
            language="javascript",
            content=EXPRESS_SERVER_TEMPLATE.format(**values),
        ),
        CodeFile(
            path=f"{prefix}/routes/tasks.js",
            language="javascript",
            content=EXPRESS_ROUTES_TEMPLATE,
        ),
    ]


def _files_for_stack(stack: TechStack, values: dict[str, str]) -> list[CodeFile]:
    slug = values["slug"]

    if stack == TechStack.REACT_TYPESCRIPT:
        return _react_files(values)

    if stack == TechStack.FULLSTACK_REACT:
        return _react_files(values) + _express_files(values, prefix="server")

    if stack == TechStack.VUE_TYPESCRIPT:
        return [
            CodeFile(path="src/App.vue", language="vue", content=VUE_APP_TEMPLATE.format(**values)),
            CodeFile(path="src/main.ts", language="typescript", content=VUE_MAIN_TEMPLATE),
            CodeFile(
                path="src/components/HelloWorld.vue",
                language="vue",
                content=VUE_COMPONENT_TEMPLATE,
            ),
            CodeFile(
                path="package.json",
                language="json",
                content=_package_json(
                    slug,
                    {"vue": "^3.4.0", "typescript": "^5.3.0"},
                    {"dev": "vite", "build": "vue-tsc && vite build"},
                ),
            ),
        ]

    if stack == TechStack.NEXTJS:
        return [
            CodeFile(
                path="app/layout.tsx",
                language="typescript",
                content=NEXT_LAYOUT_TEMPLATE.format(**values),
            ),
            CodeFile(
                path="app/page.tsx",
                language="typescript",
                content=NEXT_PAGE_TEMPLATE.format(**values),
            ),
            CodeFile(
                path="app/dashboard/page.tsx",
                language="typescript",
                content=NEXT_DASHBOARD_TEMPLATE,
            ),
            CodeFile(
                path="package.json",
                language="json",
                content=_package_json(
                    slug,
                    {"next": "^14.1.0", "react": "^18.2.0", "react-dom": "^18.2.0"},
                    {"dev": "next dev", "build": "next build", "start": "next start"},
                ),
            ),
        ]

    if stack == TechStack.NODEJS_EXPRESS:
        return _express_files(values) + [
            CodeFile(
                path="package.json",
                language="json",
                content=_package_json(
                    slug,
                    {"express": "^4.18.2", "cors": "^2.8.5"},
                    {"start": "node src/index.js"},
                ),
            ),
        ]

    if stack == TechStack.PYTHON_FASTAPI:
        return [
            CodeFile(
                path="app/main.py",
                language="python",
                content=FASTAPI_MAIN_TEMPLATE.format(**values),
            ),
            CodeFile(path="app/models.py", language="python", content=FASTAPI_MODELS_TEMPLATE),
            CodeFile(
                path="app/routers/tasks.py",
                language="python",
                content=FASTAPI_ROUTER_TEMPLATE,
            ),
            CodeFile(path="app/__init__.py", language="python", content=""),
            CodeFile(path="app/routers/__init__.py", language="python", content=""),
            CodeFile(
                path="requirements.txt",
                language="text",
                content="fastapi>=0.110\nuvicorn[standard]>=0.27\npydantic>=2.5\n",
            ),
        ]

    raise ValueError(f"No templates for tech stack {stack!r}")


def generate_project_files(
    tech_stack: TechStack | str,
    name: str,
    description: str,
) -> list[CodeFile]:
    """Starter files for ``tech_stack`` with the project's name and description filled in."""
    stack = TechStack(tech_stack)
    summary = description[:100]
    if len(description) > 100:
        summary += "..."
    values = {
        "title": name.strip() or "Your App",
        "slug": slugify(name),
        # Quotes would break the string literals the summary lands in
        "summary": summary.replace("'", "’").replace('"', "”"),
    }

    files = _files_for_stack(stack, values)
    files.append(
        CodeFile(
            path="README.md",
            language="markdown",
            content=README_TEMPLATE.format(
                title=values["title"], description=description, stack=stack.label
            ),
        )
    )
    return files
